# src/services/ride_service/repository.py
"""
Хранилище поездок Ride Service.

Хранение записей в процессе: персистентность поездок — внешняя
зависимость, сервису нужен только get/save.
"""

from __future__ import annotations

from typing import Protocol

from src.shared.models.ride import RideDTO


class RideRepository(Protocol):
    """Контракт хранилища поездок."""

    async def save(self, ride: RideDTO) -> RideDTO: ...

    async def get(self, ride_id: str) -> RideDTO | None: ...


class InMemoryRideRepository:
    """Поездки в памяти процесса."""

    def __init__(self) -> None:
        self._rides: dict[str, RideDTO] = {}

    def __len__(self) -> int:
        return len(self._rides)

    async def save(self, ride: RideDTO) -> RideDTO:
        self._rides[ride.id] = ride
        return ride

    async def get(self, ride_id: str) -> RideDTO | None:
        return self._rides.get(ride_id)
