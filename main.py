#!/usr/bin/env python3
# main.py
"""
Главная точка входа.
Запускает Ride, Driver и Rider сервисы в зависимости от COMPONENT_MODE
(или первого аргумента командной строки: all, ride, driver, rider).
"""

from __future__ import annotations

import asyncio
import sys
from typing import Callable

import uvicorn
from fastapi import FastAPI

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import ComponentMode, TypeMsg
from src.relay.context import RelayContext
from src.services.driver_service.app import create_app as create_driver_app
from src.services.ride_service.app import create_app as create_ride_app
from src.services.rider_service.app import create_app as create_rider_app


# Режим → (фабрика приложения, порт)
SERVICES: dict[ComponentMode, tuple[Callable[[RelayContext], FastAPI], int]] = {
    ComponentMode.RIDE: (create_ride_app, settings.deployment.RIDE_SERVICE_PORT),
    ComponentMode.DRIVER: (create_driver_app, settings.deployment.DRIVER_SERVICE_PORT),
    ComponentMode.RIDER: (create_rider_app, settings.deployment.RIDER_SERVICE_PORT),
}


def resolve_mode(argv: list[str]) -> ComponentMode:
    """Режим из аргументов командной строки или из настроек."""
    if len(argv) > 1:
        return ComponentMode(argv[1])
    return ComponentMode(settings.system.COMPONENT_MODE)


def build_servers(mode: ComponentMode, relay: RelayContext | None = None) -> list[uvicorn.Server]:
    """
    Создаёт uvicorn-серверы для выбранного режима.

    Все сервисы процесса получают один RelayContext, а значит одно
    соединение с RabbitMQ.
    """
    relay = relay or RelayContext.from_settings(settings)
    selected = list(SERVICES) if mode is ComponentMode.ALL else [mode]
    servers = []
    for component in selected:
        factory, port = SERVICES[component]
        config = uvicorn.Config(
            factory(relay),
            host=settings.deployment.HOST,
            port=port,
            log_level="debug" if settings.system.DEBUG else "info",
        )
        servers.append(uvicorn.Server(config))
    return servers


async def main(argv: list[str] | None = None) -> int:
    """Запускает сервисы и ждёт их остановки (SIGINT/SIGTERM обрабатывает uvicorn)."""
    setup_logging()

    try:
        mode = resolve_mode(argv if argv is not None else sys.argv)
    except ValueError as e:
        await log_error(f"Неизвестный режим запуска: {e}")
        return 2

    servers = build_servers(mode)
    await log_info(
        f"Режим {mode.value}: запуск {len(servers)} сервис(ов)",
        type_msg=TypeMsg.INFO,
    )

    results = await asyncio.gather(*(server.serve() for server in servers), return_exceptions=True)

    failed = [r for r in results if isinstance(r, BaseException)]
    for error in failed:
        await log_error(f"Сервис завершился с ошибкой: {error}")

    await log_info("Все сервисы остановлены", type_msg=TypeMsg.INFO)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
