# src/relay/long_poll.py
"""
Ответ на long-poll запрос: ровно один терминальный ответ на запрос.
"""

from __future__ import annotations

from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from src.relay.registry import PendingWaiter, WaiterRegistry


async def answer_long_poll(
    registry: WaiterRegistry,
    waiter: PendingWaiter,
    timeout: float | None = None,
) -> Response:
    """
    Ждёт события для уже зарегистрированного ожидающего.

    Returns:
        200 с JSON события или 204 без тела по таймауту
    """
    payload = await registry.wait(waiter, timeout)

    if payload is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(payload))
