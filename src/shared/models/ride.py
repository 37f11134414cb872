# src/shared/models/ride.py
"""
Модели поездки для API и событий.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.common.constants import RideStatus


class RideCreateRequest(BaseModel):
    """Запрос на создание поездки."""

    user: str = Field(..., min_length=1, description="ID пассажира")
    pickup: str = Field(..., min_length=1, description="Адрес подачи")
    destination: str = Field(..., min_length=1, description="Адрес назначения")


class RideDTO(BaseModel):
    """
    Запись о поездке.

    Неизменяема: смена статуса создаёт новую копию через model_copy.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    user: str
    captain: str | None = None
    pickup: str
    destination: str
    status: RideStatus = RideStatus.REQUESTED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def with_status(self, status: RideStatus, captain: str | None = None) -> "RideDTO":
        """Возвращает копию поездки с новым статусом."""
        update: dict[str, object] = {"status": status}
        if captain is not None:
            update["captain"] = captain
        return self.model_copy(update=update)
