# src/infra/broker.py
"""
Менеджер соединения с RabbitMQ.

Одно лениво устанавливаемое соединение и один канал на процесс.
Топик — это durable очередь с тем же именем, сообщения идут через
default exchange с routing_key = имя топика.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable

import aio_pika
from aio_pika import DeliveryMode, Message
from aio_pika.abc import (
    AbstractChannel,
    AbstractIncomingMessage,
    AbstractQueue,
    AbstractRobustConnection,
)

from src.common.constants import AckPolicy, TypeMsg
from src.common.exceptions import BrokerUnavailable, PublishFailure
from src.common.logger import log_error, log_info, log_warning


# Обработчик сырого тела сообщения
MessageCallback = Callable[[bytes], Awaitable[None]]


class BrokerConnection:
    """
    Соединение с RabbitMQ, общее для всех publish/subscribe в процессе.

    Реализует:
    - Идемпотентное подключение без гонок (single-flight под asyncio.Lock)
    - Идемпотентное объявление топиков
    - Публикацию и подписку с настраиваемой политикой ack
    """

    def __init__(
        self,
        url: str,
        prefetch_count: int = 10,
        ack_policy: AckPolicy = AckPolicy.ALWAYS,
    ) -> None:
        """
        Args:
            url: URL RabbitMQ (непрозрачная строка из конфигурации)
            prefetch_count: Количество сообщений для prefetch
            ack_policy: Когда подтверждать доставленные сообщения
        """
        self._url = url
        self._prefetch_count = prefetch_count
        self._ack_policy = AckPolicy(ack_policy)
        self._connection: AbstractRobustConnection | None = None
        self._channel: AbstractChannel | None = None
        self._queues: dict[str, AbstractQueue] = {}
        self._consumer_tags: dict[str, str] = {}
        self._lock = asyncio.Lock()
        self._subscribe_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """Проверяет, активно ли соединение."""
        return self._connection is not None and not self._connection.is_closed

    @property
    def ack_policy(self) -> AckPolicy:
        return self._ack_policy

    @property
    def subscribed_topics(self) -> set[str]:
        return set(self._consumer_tags)

    async def ensure_connected(self) -> AbstractChannel:
        """
        Подключается к RabbitMQ, если соединения ещё нет.

        Конкурентные вызовы ждут одну и ту же попытку подключения.

        Returns:
            Открытый канал

        Raises:
            BrokerUnavailable: если подключение или открытие канала не удалось
        """
        if self.is_connected and self._channel is not None:
            return self._channel

        async with self._lock:
            # Пока ждали блокировку, соединение мог открыть другой вызов
            if self.is_connected and self._channel is not None:
                return self._channel

            await log_info("Подключение к RabbitMQ...", type_msg=TypeMsg.INFO)

            connection: AbstractRobustConnection | None = None
            try:
                connection = await aio_pika.connect_robust(self._url)
                channel = await connection.channel()
                await channel.set_qos(prefetch_count=self._prefetch_count)
            except Exception as e:
                await log_error(f"RabbitMQ недоступен: {e}")
                if connection is not None:
                    await self._close_quietly(connection)
                raise BrokerUnavailable(f"Не удалось подключиться к RabbitMQ: {e}") from e

            self._connection = connection
            self._channel = channel
            self._queues = {}

            await log_info("Подключение к RabbitMQ установлено", type_msg=TypeMsg.INFO)
            return channel

    async def _declare_topic(self, channel: AbstractChannel, topic: str) -> AbstractQueue:
        """Объявляет очередь топика (повторные вызовы берут её из кэша)."""
        queue = self._queues.get(topic)
        if queue is None:
            queue = await channel.declare_queue(topic, durable=True)
            self._queues[topic] = queue
        return queue

    async def publish(self, topic: str, body: bytes, message_id: str | None = None) -> None:
        """
        Публикует сообщение в топик.

        Args:
            topic: Имя топика
            body: Сериализованное событие
            message_id: ID сообщения (обычно event_id)

        Raises:
            BrokerUnavailable: нет соединения с брокером
            PublishFailure: соединение есть, но отправка не удалась
        """
        channel = await self.ensure_connected()

        try:
            await self._declare_topic(channel, topic)
            await channel.default_exchange.publish(
                Message(
                    body=body,
                    content_type="application/json",
                    delivery_mode=DeliveryMode.PERSISTENT,
                    message_id=message_id,
                    timestamp=datetime.now(timezone.utc),
                ),
                routing_key=topic,
            )
        except Exception as e:
            await log_error(f"Ошибка публикации в '{topic}': {e}")
            raise PublishFailure(topic, str(e)) from e

        await log_info(f"Сообщение опубликовано: {topic}", type_msg=TypeMsg.DEBUG)

    async def subscribe(self, topic: str, callback: MessageCallback) -> str:
        """
        Подписывается на топик.

        callback вызывается один раз на каждое доставленное сообщение.
        Повторная подписка на тот же топик ничего не делает.

        Returns:
            consumer tag

        Raises:
            BrokerUnavailable: если подключиться или начать потребление не удалось
        """
        async with self._subscribe_lock:
            # Проверка под блокировкой: конкурентный вызов мог уже подписаться
            if topic in self._consumer_tags:
                await log_warning(f"Подписка на '{topic}' уже активна")
                return self._consumer_tags[topic]

            channel = await self.ensure_connected()

            try:
                queue = await self._declare_topic(channel, topic)
                consumer_tag = await queue.consume(self._make_consumer(topic, callback))
            except Exception as e:
                await log_error(f"Не удалось подписаться на '{topic}': {e}")
                raise BrokerUnavailable(f"Не удалось подписаться на '{topic}': {e}") from e

            self._consumer_tags[topic] = consumer_tag

        await log_info(f"Подписка на топик: {topic}", type_msg=TypeMsg.INFO)
        return consumer_tag

    def _make_consumer(
        self,
        topic: str,
        callback: MessageCallback,
    ) -> Callable[[AbstractIncomingMessage], Awaitable[None]]:
        """Создаёт consumer, который применяет политику ack."""
        async def consumer(message: AbstractIncomingMessage) -> None:
            try:
                await callback(message.body)
            except Exception as e:
                await log_error(
                    f"Ошибка обработки сообщения из '{topic}': {e}",
                    extra={"topic": topic, "message_id": message.message_id},
                    exc_info=True,
                )
                if self._ack_policy is AckPolicy.ON_SUCCESS:
                    await message.nack(requeue=True)
                    return

            await message.ack()

        return consumer

    async def close(self) -> None:
        """Закрывает соединение с RabbitMQ."""
        if self._connection is None:
            return

        connection = self._connection
        self._connection = None
        self._channel = None
        self._queues = {}
        self._consumer_tags = {}

        await self._close_quietly(connection)
        await log_info("Соединение с RabbitMQ закрыто", type_msg=TypeMsg.INFO)

    async def health_check(self) -> bool:
        """True, если соединение с RabbitMQ активно."""
        return self.is_connected

    @staticmethod
    async def _close_quietly(connection: AbstractRobustConnection) -> None:
        try:
            await connection.close()
        except Exception as e:
            await log_warning(f"Ошибка при закрытии соединения RabbitMQ: {e}")
