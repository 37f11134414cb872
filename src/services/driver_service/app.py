# src/services/driver_service/app.py
"""
FastAPI приложение для Driver Service.

При старте подписывается на топик new-ride; каждая новая поездка
рассылается всем водителям, ожидающим на /rides/wait-for-new-ride.
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
from src.services.driver_service.routes import router
from src.shared.models.common import HealthStatus


SERVICE_NAME = "driver_service"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info("Driver Service запускается...", type_msg=TypeMsg.INFO)

    relay: RelayContext = app.state.relay
    await relay.start()

    yield

    await relay.close()
    await log_info("Driver Service остановлен", type_msg=TypeMsg.INFO)


def create_app(relay: RelayContext | None = None) -> FastAPI:
    """
    Собирает приложение.

    Args:
        relay: Контекст релея (по умолчанию из настроек)
    """
    relay = relay or RelayContext.from_settings(settings)
    relay.listen_new_rides()

    app = FastAPI(
        title="Driver Service",
        description="Long-poll новых поездок для водителей",
        version=settings.system.VERSION,
        lifespan=lifespan,
    )
    app.state.relay = relay

    app.include_router(router)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check(context: RelayContext = Depends(get_relay)) -> HealthStatus:
        """Проверка здоровья сервиса."""
        return await build_health(SERVICE_NAME, context, context.new_rides)

    return app
