# src/infra/dispatcher.py
"""
Диспетчер топиков: превращает сообщения из очереди в вызовы
обработчиков внутри процесса.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic

from pydantic import ValidationError

from src.common.constants import TypeMsg
from src.common.exceptions import DuplicateHandlerError, MalformedEvent
from src.common.logger import log_error, log_info, log_warning
from src.infra.broker import BrokerConnection
from src.shared.events.base import DomainEvent, EventT


EventHandler = Callable[[EventT], Awaitable[None]]


@dataclass(frozen=True)
class _Route(Generic[EventT]):
    event_cls: type[EventT]
    handler: EventHandler


class TopicDispatcher:
    """
    Один обработчик на топик на процесс.

    Повторная регистрация того же топика отклоняется с
    DuplicateHandlerError. Некорректные сообщения логируются и
    отбрасываются (ack без повторной доставки).
    """

    def __init__(self, broker: BrokerConnection) -> None:
        self._broker = broker
        self._routes: dict[str, _Route] = {}
        self._started = False

    @property
    def topics(self) -> list[str]:
        return list(self._routes)

    def on_topic(
        self,
        topic: str,
        handler: EventHandler,
        event_cls: type[DomainEvent] = DomainEvent,
    ) -> None:
        """
        Регистрирует обработчик топика.

        Args:
            topic: Имя топика
            handler: Асинхронный обработчик декодированного события
            event_cls: Класс события для десериализации

        Raises:
            DuplicateHandlerError: если на топик уже есть обработчик
        """
        if topic in self._routes:
            raise DuplicateHandlerError(topic)
        self._routes[topic] = _Route(event_cls=event_cls, handler=handler)

    async def start(self) -> None:
        """Подписывается на все зарегистрированные топики (один раз)."""
        if self._started:
            return
        # Флаг ставится до первого await, чтобы конкурентный start не подписался повторно
        self._started = True

        try:
            for topic in self._routes:
                await self._broker.subscribe(topic, self._make_callback(topic))
        except Exception:
            self._started = False
            raise

        await log_info(f"Диспетчер слушает топики: {', '.join(self._routes)}", type_msg=TypeMsg.INFO)

    def _make_callback(self, topic: str) -> Callable[[bytes], Awaitable[None]]:
        async def callback(body: bytes) -> None:
            await self.dispatch(topic, body)

        return callback

    def decode(self, topic: str, body: bytes) -> DomainEvent:
        """
        Декодирует тело сообщения в событие топика.

        Raises:
            MalformedEvent: если тело не удалось десериализовать
        """
        route = self._routes[topic]
        try:
            return route.event_cls.from_json(body)
        except (ValidationError, ValueError, UnicodeDecodeError) as e:
            raise MalformedEvent(topic, body, str(e)) from e

    async def dispatch(self, topic: str, body: bytes) -> None:
        """
        Обрабатывает одно сообщение топика.

        Ошибки обработчика логируются и пробрасываются дальше, чтобы
        BrokerConnection применил политику ack.
        """
        route = self._routes.get(topic)
        if route is None:
            await log_warning(f"Сообщение из топика без обработчика: {topic}")
            return

        try:
            event = self.decode(topic, body)
        except MalformedEvent as e:
            await log_error(
                f"Сообщение отброшено: {e}",
                extra={"topic": topic, "body": e.preview},
            )
            return

        await log_info(
            f"Получено событие {event.event_type} ({event.event_id})",
            type_msg=TypeMsg.DEBUG,
        )

        try:
            await route.handler(event)
        except Exception as e:
            await log_error(
                f"Ошибка в обработчике топика '{topic}': {e}",
                extra={"topic": topic, "event_id": event.event_id},
            )
            raise
