# src/infra/publisher.py
"""
Публикация доменных событий в топики.
"""

from __future__ import annotations

from src.infra.broker import BrokerConnection
from src.shared.events.base import DomainEvent


class TopicPublisher:
    """
    Тонкая обёртка для обработчиков запросов: сериализует событие и
    передаёт его в BrokerConnection.

    Повторов нет. BrokerUnavailable и PublishFailure пробрасываются
    вызывающему обработчику, он и решает, что ответить клиенту.
    """

    def __init__(self, broker: BrokerConnection) -> None:
        self._broker = broker

    async def publish_event(self, topic: str, event: DomainEvent) -> None:
        """
        Публикует событие.

        Args:
            topic: Имя топика
            event: Доменное событие
        """
        await self._broker.publish(
            topic,
            event.to_json().encode("utf-8"),
            message_id=event.event_id,
        )
