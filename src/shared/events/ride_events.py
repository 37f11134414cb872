# src/shared/events/ride_events.py
"""
События домена поездок, которые проходят через релей.
"""

from __future__ import annotations

from typing import Literal

from src.shared.events.base import DomainEvent
from src.shared.models.ride import RideDTO


class RideEvent(DomainEvent):
    """Событие, несущее запись о поездке."""

    ride: RideDTO


class NewRideEvent(RideEvent):
    """Событие: создан новый запрос на поездку."""

    event_type: Literal["new-ride"] = "new-ride"


class RideAcceptedEvent(RideEvent):
    """Событие: водитель принял поездку."""

    event_type: Literal["ride-accepted"] = "ride-accepted"
