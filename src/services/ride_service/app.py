# src/services/ride_service/app.py
"""
FastAPI приложение для Ride Service.

Создаёт и принимает поездки, публикует события new-ride и ride-accepted.
Соединение с RabbitMQ устанавливается лениво при первой публикации.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI

from src.common.constants import TypeMsg
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.relay.context import RelayContext
from src.services.dependencies import build_health, get_relay
from src.services.ride_service.repository import InMemoryRideRepository, RideRepository
from src.services.ride_service.routes import router
from src.services.ride_service.service import RideService
from src.shared.models.common import HealthStatus


SERVICE_NAME = "ride_service"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info("Ride Service запускается...", type_msg=TypeMsg.INFO)

    yield

    await app.state.relay.close()
    await log_info("Ride Service остановлен", type_msg=TypeMsg.INFO)


def create_app(
    relay: RelayContext | None = None,
    repository: RideRepository | None = None,
) -> FastAPI:
    """
    Собирает приложение.

    Args:
        relay: Контекст релея (по умолчанию из настроек)
        repository: Хранилище поездок (по умолчанию в памяти)
    """
    relay = relay or RelayContext.from_settings(settings)

    app = FastAPI(
        title="Ride Service",
        description="Создание и принятие поездок",
        version=settings.system.VERSION,
        lifespan=lifespan,
    )
    app.state.relay = relay
    app.state.ride_service = RideService(
        repository=repository or InMemoryRideRepository(),
        publisher=relay.publisher,
        new_ride_topic=relay.new_ride_topic,
        ride_accepted_topic=relay.ride_accepted_topic,
        source_service=SERVICE_NAME,
    )

    app.include_router(router)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check(context: RelayContext = Depends(get_relay)) -> HealthStatus:
        """Проверка здоровья сервиса."""
        return await build_health(SERVICE_NAME, context)

    return app
