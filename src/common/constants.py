# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RideStatus(str, Enum):
    """Статусы поездки."""
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    STARTED = "started"
    COMPLETED = "completed"


class Topics(str, Enum):
    """Имена топиков (очередей) брокера."""
    NEW_RIDE = "new-ride"
    RIDE_ACCEPTED = "ride-accepted"


class AckPolicy(str, Enum):
    """
    Политика подтверждения сообщений.

    ALWAYS — ack после обработчика независимо от результата.
    ON_SUCCESS — ack только при успехе, иначе nack с возвратом в очередь.
    """
    ALWAYS = "always"
    ON_SUCCESS = "on_success"


class ComponentMode(str, Enum):
    """Какие сервисы запускать из main.py."""
    ALL = "all"
    RIDE = "ride"
    DRIVER = "driver"
    RIDER = "rider"


# Таймаут long-poll запроса по умолчанию (секунды)
DEFAULT_LONG_POLL_TIMEOUT: float = 30.0
