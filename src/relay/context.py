# src/relay/context.py
"""
Состояние релея уровня процесса.

Соединение с брокером, диспетчер и реестры создаются один раз на
процесс и передаются обработчикам запросов через app.state.
"""

from __future__ import annotations

from src.common.constants import AckPolicy, DEFAULT_LONG_POLL_TIMEOUT, Topics, TypeMsg
from src.common.logger import log_info, log_warning
from src.config.loader import Settings
from src.infra.broker import BrokerConnection
from src.infra.dispatcher import TopicDispatcher
from src.infra.publisher import TopicPublisher
from src.relay.registry import BroadcastRegistry, SingleSlotRegistry
from src.shared.events.ride_events import NewRideEvent, RideAcceptedEvent


# Ключ одноразового сигнала о принятии поездки
RIDE_ACCEPTED_SIGNAL = Topics.RIDE_ACCEPTED.value


class RelayContext:
    """
    Всё, что нужно сервису для публикации и long-poll релея.

    Args:
        broker: Соединение с брокером
        timeout: Таймаут long-poll в секундах
        new_ride_topic: Топик новых поездок
        ride_accepted_topic: Топик принятых поездок
    """

    def __init__(
        self,
        broker: BrokerConnection,
        timeout: float = DEFAULT_LONG_POLL_TIMEOUT,
        new_ride_topic: str = Topics.NEW_RIDE.value,
        ride_accepted_topic: str = Topics.RIDE_ACCEPTED.value,
    ) -> None:
        self.broker = broker
        self.publisher = TopicPublisher(broker)
        self.dispatcher = TopicDispatcher(broker)
        self.new_rides = BroadcastRegistry(timeout)
        self.acceptances = SingleSlotRegistry(timeout)
        self.new_ride_topic = new_ride_topic
        self.ride_accepted_topic = ride_accepted_topic

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayContext":
        """Создаёт контекст из настроек приложения."""
        broker = BrokerConnection(
            url=settings.rabbitmq.url,
            prefetch_count=settings.rabbitmq.RABBITMQ_PREFETCH_COUNT,
            ack_policy=AckPolicy(settings.rabbitmq.RABBITMQ_ACK_POLICY),
        )
        return cls(
            broker,
            timeout=settings.relay.LONG_POLL_TIMEOUT,
            new_ride_topic=settings.rabbitmq.NEW_RIDE_TOPIC,
            ride_accepted_topic=settings.rabbitmq.RIDE_ACCEPTED_TOPIC,
        )

    def listen_new_rides(self) -> None:
        """Сторона водителя: новые поездки рассылаются всем ожидающим."""
        self.dispatcher.on_topic(self.new_ride_topic, self._on_new_ride, NewRideEvent)

    def listen_acceptances(self) -> None:
        """Сторона пассажира: принятая поездка завершает ожидающего."""
        self.dispatcher.on_topic(self.ride_accepted_topic, self._on_ride_accepted, RideAcceptedEvent)

    async def _on_new_ride(self, event: NewRideEvent) -> None:
        delivered = self.new_rides.broadcast_and_clear(event.ride)
        await log_info(
            f"Поездка {event.ride.id} разослана водителям: {delivered}",
            type_msg=TypeMsg.INFO,
        )

    async def _on_ride_accepted(self, event: RideAcceptedEvent) -> None:
        if self.acceptances.fire(RIDE_ACCEPTED_SIGNAL, event.ride):
            await log_info(f"Принятие поездки {event.ride.id} доставлено пассажиру", type_msg=TypeMsg.INFO)
        else:
            await log_warning(f"Принятие поездки {event.ride.id}: никто не ждёт, событие отброшено")

    async def start(self) -> None:
        """Подключается к брокеру и запускает подписки диспетчера."""
        await self.broker.ensure_connected()
        await self.dispatcher.start()

    async def close(self) -> None:
        await self.broker.close()
