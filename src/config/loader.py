# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Адреса и секретные данные переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.common.constants import AckPolicy, ComponentMode, DEFAULT_LONG_POLL_TIMEOUT


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """Загружает config.json и возвращает словарь без ключей-комментариев."""
    config_path = path or get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "ride_relay"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: ComponentMode = ComponentMode.ALL


class DeploymentSettings(BaseModel):
    """Адреса и порты сервисов."""
    HOST: str = "0.0.0.0"
    RIDE_SERVICE_PORT: int = 3003
    RIDER_SERVICE_PORT: int = 3001
    DRIVER_SERVICE_PORT: int = 3002


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Допустимы только colored и json."""
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный LOG_FORMAT: {v}")
        return v


class RabbitMQSettings(BaseModel):
    """Настройки RabbitMQ."""
    RABBIT_URL: str | None = None
    RABBITMQ_HOST: str = "localhost"
    RABBITMQ_PORT: int = 5672
    RABBITMQ_USER: str = "guest"
    RABBITMQ_PASSWORD: str = "guest"
    RABBITMQ_VHOST: str = "/"
    RABBITMQ_PREFETCH_COUNT: int = 10
    RABBITMQ_ACK_POLICY: AckPolicy = AckPolicy.ALWAYS
    NEW_RIDE_TOPIC: str = "new-ride"
    RIDE_ACCEPTED_TOPIC: str = "ride-accepted"

    @field_validator("RABBITMQ_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Пароль из окружения имеет приоритет."""
        env_pass = os.getenv("RABBITMQ_PASSWORD", "")
        if env_pass:
            return env_pass
        return v

    @property
    def url(self) -> str:
        """
        URL для подключения к RabbitMQ.

        RABBIT_URL, если задан, используется как есть (непрозрачная строка).
        """
        if self.RABBIT_URL:
            return self.RABBIT_URL
        vhost = "/" + quote(self.RABBITMQ_VHOST.lstrip("/"), safe="") if self.RABBITMQ_VHOST != "/" else "/"
        return (
            f"amqp://{self.RABBITMQ_USER}:{self.RABBITMQ_PASSWORD}"
            f"@{self.RABBITMQ_HOST}:{self.RABBITMQ_PORT}{vhost}"
        )


class RelaySettings(BaseModel):
    """Настройки long-poll релея."""
    LONG_POLL_TIMEOUT: float = Field(default=DEFAULT_LONG_POLL_TIMEOUT, gt=0)


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rabbitmq: RabbitMQSettings = Field(default_factory=RabbitMQSettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)

    @classmethod
    def from_config_json(cls, path: Path | None = None) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Адреса и секреты переопределяются из переменных окружения.
        """
        data = load_config_json(path)

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "ride_relay"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
                COMPONENT_MODE=os.getenv("COMPONENT_MODE", data.get("COMPONENT_MODE", "all")),
            ),
            deployment=DeploymentSettings(
                HOST=os.getenv("HOST", data.get("HOST", "0.0.0.0")),
                RIDE_SERVICE_PORT=int(os.getenv("RIDE_SERVICE_PORT", data.get("RIDE_SERVICE_PORT", 3003))),
                RIDER_SERVICE_PORT=int(os.getenv("RIDER_SERVICE_PORT", data.get("RIDER_SERVICE_PORT", 3001))),
                DRIVER_SERVICE_PORT=int(os.getenv("DRIVER_SERVICE_PORT", data.get("DRIVER_SERVICE_PORT", 3002))),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "DEBUG")),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            rabbitmq=RabbitMQSettings(
                RABBIT_URL=os.getenv("RABBIT_URL", data.get("RABBIT_URL")),
                RABBITMQ_HOST=os.getenv("RABBITMQ_HOST", data.get("RABBITMQ_HOST", "localhost")),
                RABBITMQ_PORT=int(os.getenv("RABBITMQ_PORT", data.get("RABBITMQ_PORT", 5672))),
                RABBITMQ_USER=os.getenv("RABBITMQ_USER", data.get("RABBITMQ_USER", "guest")),
                RABBITMQ_PASSWORD=data.get("RABBITMQ_PASSWORD", "guest"),
                RABBITMQ_VHOST=data.get("RABBITMQ_VHOST", "/"),
                RABBITMQ_PREFETCH_COUNT=data.get("RABBITMQ_PREFETCH_COUNT", 10),
                RABBITMQ_ACK_POLICY=os.getenv(
                    "RABBITMQ_ACK_POLICY", data.get("RABBITMQ_ACK_POLICY", "always")
                ),
                NEW_RIDE_TOPIC=data.get("NEW_RIDE_TOPIC", "new-ride"),
                RIDE_ACCEPTED_TOPIC=data.get("RIDE_ACCEPTED_TOPIC", "ride-accepted"),
            ),
            relay=RelaySettings(
                LONG_POLL_TIMEOUT=float(
                    os.getenv("LONG_POLL_TIMEOUT", data.get("LONG_POLL_TIMEOUT", DEFAULT_LONG_POLL_TIMEOUT))
                )
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Перед чтением config.json подгружает .env из корня проекта.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


settings = get_settings()
