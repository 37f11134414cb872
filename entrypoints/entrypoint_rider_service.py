#!/usr/bin/env python3
# entrypoint_rider_service.py
"""
Точка входа для Rider Service.
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings
from src.common.logger import log_info
from src.common.constants import TypeMsg


async def main() -> None:
    """Запуск Rider Service."""
    await log_info(
        f"Запуск Rider Service на порту {settings.deployment.RIDER_SERVICE_PORT}",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "src.services.rider_service.app:create_app",
        factory=True,
        host=settings.deployment.HOST,
        port=settings.deployment.RIDER_SERVICE_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
