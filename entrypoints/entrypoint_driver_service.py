#!/usr/bin/env python3
# entrypoint_driver_service.py
"""
Точка входа для Driver Service.
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
    """Запуск Driver Service."""
    await log_info(
        f"Запуск Driver Service на порту {settings.deployment.DRIVER_SERVICE_PORT}",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "src.services.driver_service.app:create_app",
        factory=True,
        host=settings.deployment.HOST,
        port=settings.deployment.DRIVER_SERVICE_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
