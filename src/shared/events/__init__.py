# src/shared/events/__init__.py
"""
Схемы событий для RabbitMQ.

- new-ride: новая поездка, рассылается всем ожидающим водителям
- ride-accepted: поездка принята, доставляется ожидающему пассажиру
"""

from src.shared.events.base import DomainEvent, EventMetadata
from src.shared.events.ride_events import NewRideEvent, RideAcceptedEvent, RideEvent

__all__ = [
    "DomainEvent",
    "EventMetadata",
    "RideEvent",
    "NewRideEvent",
    "RideAcceptedEvent",
]
