# src/shared/events/base.py
"""
Базовые классы для доменных событий.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class EventMetadata(BaseModel):
    """Метаданные события для трассировки."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_service: str = ""


class DomainEvent(BaseModel):
    """
    Базовый класс для всех доменных событий.

    События иммутабельны после создания и сериализуются в JSON,
    event_type совпадает с именем топика, в который событие публикуется.
    """

    model_config = ConfigDict(frozen=True)

    event_type: str = ""
    metadata: EventMetadata = Field(default_factory=EventMetadata)

    def to_json(self) -> str:
        """Сериализует событие в JSON."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls: type[EventT], data: str | bytes) -> EventT:
        """Десериализует событие из JSON."""
        return cls.model_validate_json(data)

    @property
    def event_id(self) -> str:
        return self.metadata.event_id


EventT = TypeVar("EventT", bound=DomainEvent)
