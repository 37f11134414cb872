# src/services/ride_service/dependencies.py
"""
Зависимости для Ride Service.
"""

from __future__ import annotations

from fastapi import Request

from src.services.ride_service.service import RideService


def get_ride_service(request: Request) -> RideService:
    service = getattr(request.app.state, "ride_service", None)
    if service is None:
        raise RuntimeError("RideService не инициализирован")
    return service
