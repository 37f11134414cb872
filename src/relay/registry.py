# src/relay/registry.py
"""
Реестры ожидающих long-poll запросов.

Две формы:
- BroadcastRegistry — одно событие завершает всех зарегистрированных
  (новая поездка рассылается всем ожидающим водителям);
- SingleSlotRegistry — одноразовый сигнал по ключу, завершает не более
  одного ожидающего на каждый fire, без буферизации.

Все мутации коллекций синхронны и выполняются в event loop процесса,
поэтому не перемежаются между собой. Завершение ожидающего эксклюзивно:
из {таймаут, доставка} выигрывает ровно один.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Hashable
from uuid import uuid4

from src.common.constants import DEFAULT_LONG_POLL_TIMEOUT, TypeMsg
from src.common.exceptions import StaleResolution
from src.common.logger import log_info


class WaiterState(str, Enum):
    """Состояния ожидающего. Все, кроме PENDING, терминальные."""
    PENDING = "pending"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class PendingWaiter:
    """
    Дескриптор одного ожидающего HTTP-ответа.

    Переходит из PENDING в терминальное состояние ровно один раз;
    повторная попытка завершения — безопасный no-op.
    """

    __slots__ = ("waiter_id", "key", "_future", "_state", "_payload")

    def __init__(self, key: Hashable | None = None) -> None:
        self.waiter_id: str = uuid4().hex
        self.key = key
        self._future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._state = WaiterState.PENDING
        self._payload: Any = None

    def __repr__(self) -> str:
        return f"PendingWaiter(id={self.waiter_id[:8]}, key={self.key!r}, state={self._state.value})"

    @property
    def state(self) -> WaiterState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state is not WaiterState.PENDING

    @property
    def payload(self) -> Any:
        """Доставленные данные (None, пока ожидающий не RESOLVED)."""
        return self._payload

    def _settle(self, state: WaiterState, payload: Any = None) -> None:
        if self._state is not WaiterState.PENDING:
            raise StaleResolution(f"{self!r} уже завершён")
        self._state = state
        self._payload = payload
        if not self._future.done():
            self._future.set_result(None)

    def resolve(self, payload: Any) -> bool:
        """Доставляет данные. False, если ожидающий уже завершён."""
        try:
            self._settle(WaiterState.RESOLVED, payload)
        except StaleResolution:
            return False
        return True

    def expire(self) -> bool:
        """Помечает ожидающего как истёкшего. False, если он уже завершён."""
        try:
            self._settle(WaiterState.TIMED_OUT)
        except StaleResolution:
            return False
        return True

    def cancel(self) -> bool:
        """Клиент ушёл до ответа. False, если ожидающий уже завершён."""
        try:
            self._settle(WaiterState.CANCELLED)
        except StaleResolution:
            return False
        return True

    async def wait(self, timeout: float) -> bool:
        """Ждёт завершения не дольше timeout. True, если ожидающий завершён."""
        await asyncio.wait({self._future}, timeout=timeout)
        return self.done


class WaiterRegistry(ABC):
    """Общая часть реестров: ожидание с таймаутом и статистика."""

    name: str = "registry"

    def __init__(self, timeout: float = DEFAULT_LONG_POLL_TIMEOUT) -> None:
        if timeout <= 0:
            raise ValueError("timeout должен быть положительным")
        self.timeout = timeout
        self._delivered_total = 0
        self._timed_out_total = 0

    @property
    @abstractmethod
    def pending_count(self) -> int:
        """Количество ожидающих в реестре."""

    @abstractmethod
    def discard(self, waiter: PendingWaiter) -> bool:
        """Удаляет ожидающего из реестра. False, если его там уже нет."""

    def __len__(self) -> int:
        return self.pending_count

    async def wait(self, waiter: PendingWaiter, timeout: float | None = None) -> Any | None:
        """
        Ждёт события для ожидающего.

        По таймауту ожидающий атомарно помечается истёкшим и удаляется
        из реестра; поздняя доставка его уже не затронет. Если запрос
        отменён (клиент отключился), ожидающий тоже удаляется.

        Returns:
            Доставленные данные или None по таймауту
        """
        limit = self.timeout if timeout is None else timeout

        try:
            await waiter.wait(limit)
        except asyncio.CancelledError:
            if waiter.cancel():
                self.discard(waiter)
            raise

        # Проверка и удаление в одном синхронном шаге
        if waiter.expire():
            self.discard(waiter)
            self._timed_out_total += 1
            await log_info(
                f"{self.name}: ожидание истекло ({waiter!r})",
                type_msg=TypeMsg.DEBUG,
            )
            return None

        return waiter.payload

    def stats(self) -> dict[str, int]:
        """Статистика реестра."""
        return {
            "pending": self.pending_count,
            "delivered_total": self._delivered_total,
            "timed_out_total": self._timed_out_total,
        }


class BroadcastRegistry(WaiterRegistry):
    """
    Реестр рассылки: все ожидающие на момент broadcast_and_clear получают
    одно и то же событие, после чего реестр пуст.
    """

    name = "broadcast"

    def __init__(self, timeout: float = DEFAULT_LONG_POLL_TIMEOUT) -> None:
        super().__init__(timeout)
        # dict сохраняет порядок регистрации
        self._waiters: dict[str, PendingWaiter] = {}

    @property
    def pending_count(self) -> int:
        return len(self._waiters)

    def register(self) -> PendingWaiter:
        """Добавляет ожидающего. Не блокирует."""
        waiter = PendingWaiter()
        self._waiters[waiter.waiter_id] = waiter
        return waiter

    def discard(self, waiter: PendingWaiter) -> bool:
        return self._waiters.pop(waiter.waiter_id, None) is not None

    def broadcast_and_clear(self, payload: Any) -> int:
        """
        Доставляет payload всем зарегистрированным и очищает реестр.

        Returns:
            Сколько ожидающих получили событие
        """
        waiters, self._waiters = self._waiters, {}
        delivered = sum(1 for waiter in waiters.values() if waiter.resolve(payload))
        self._delivered_total += delivered
        return delivered


class SingleSlotRegistry(WaiterRegistry):
    """
    Одноразовый сигнал по ключу.

    fire завершает не более одного ожидающего (самого раннего) для ключа.
    Если по ключу никто не ждёт, событие теряется: ничего не сохраняется
    и более поздний await_once его не получит.
    """

    name = "single_slot"

    def __init__(self, timeout: float = DEFAULT_LONG_POLL_TIMEOUT) -> None:
        super().__init__(timeout)
        self._listeners: dict[Hashable, dict[str, PendingWaiter]] = {}

    @property
    def pending_count(self) -> int:
        return sum(len(listeners) for listeners in self._listeners.values())

    def listeners(self, key: Hashable) -> int:
        """Количество ожидающих по ключу."""
        return len(self._listeners.get(key, {}))

    def await_once(self, key: Hashable) -> PendingWaiter:
        """Регистрирует ожидающего следующего fire(key, ...)."""
        waiter = PendingWaiter(key)
        self._listeners.setdefault(key, {})[waiter.waiter_id] = waiter
        return waiter

    def discard(self, waiter: PendingWaiter) -> bool:
        listeners = self._listeners.get(waiter.key)
        if not listeners or listeners.pop(waiter.waiter_id, None) is None:
            return False
        if not listeners:
            del self._listeners[waiter.key]
        return True

    def fire(self, key: Hashable, payload: Any) -> bool:
        """
        Завершает самого раннего ожидающего по ключу.

        Returns:
            True, если событие кому-то доставлено
        """
        listeners = self._listeners.get(key)
        delivered = False

        while listeners and not delivered:
            waiter_id = next(iter(listeners))
            waiter = listeners.pop(waiter_id)
            delivered = waiter.resolve(payload)

        if key in self._listeners and not self._listeners[key]:
            del self._listeners[key]

        if delivered:
            self._delivered_total += 1
        return delivered
