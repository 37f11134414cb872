# src/services/dependencies.py
"""
Общие зависимости сервисов.
"""

from __future__ import annotations

from fastapi import Request

from src.config import settings
from src.relay.context import RelayContext
from src.relay.registry import WaiterRegistry
from src.shared.models.common import HealthStatus


def get_relay(request: Request) -> RelayContext:
    """RelayContext процесса, созданный в create_app."""
    relay = getattr(request.app.state, "relay", None)
    if relay is None:
        raise RuntimeError("RelayContext не инициализирован")
    return relay


async def build_health(
    service: str,
    relay: RelayContext,
    registry: WaiterRegistry | None = None,
) -> HealthStatus:
    """Статус сервиса: соединение с RabbitMQ и число ожидающих."""
    rabbit_ok = await relay.broker.health_check()

    return HealthStatus(
        service=service,
        status="healthy" if rabbit_ok else "degraded",
        version=settings.system.VERSION,
        pending_waiters=registry.pending_count if registry is not None else 0,
        dependencies={"rabbitmq": "healthy" if rabbit_ok else "unhealthy"},
    )
