# src/infra/__init__.py
"""
Инфраструктурный слой.
Работа с RabbitMQ: соединение, публикация, диспетчеризация топиков.
"""

from src.infra.broker import BrokerConnection
from src.infra.dispatcher import TopicDispatcher
from src.infra.publisher import TopicPublisher

__all__ = [
    "BrokerConnection",
    "TopicDispatcher",
    "TopicPublisher",
]
