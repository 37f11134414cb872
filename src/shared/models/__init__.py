# src/shared/models/__init__.py
"""
Общие Pydantic модели сервисов.
"""

from src.shared.models.common import ErrorResponse, HealthStatus
from src.shared.models.ride import RideCreateRequest, RideDTO

__all__ = [
    "ErrorResponse",
    "HealthStatus",
    "RideCreateRequest",
    "RideDTO",
]
