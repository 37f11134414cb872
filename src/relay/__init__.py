# src/relay/__init__.py
"""
Релей уведомлений: очередь брокера → ожидающие long-poll запросы.
"""

from src.relay.context import RIDE_ACCEPTED_SIGNAL, RelayContext
from src.relay.long_poll import answer_long_poll
from src.relay.registry import (
    BroadcastRegistry,
    PendingWaiter,
    SingleSlotRegistry,
    WaiterRegistry,
    WaiterState,
)

__all__ = [
    "RIDE_ACCEPTED_SIGNAL",
    "RelayContext",
    "answer_long_poll",
    "BroadcastRegistry",
    "PendingWaiter",
    "SingleSlotRegistry",
    "WaiterRegistry",
    "WaiterState",
]
