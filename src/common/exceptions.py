# src/common/exceptions.py
"""
Иерархия исключений релея уведомлений.
"""

from __future__ import annotations


class RelayError(Exception):
    """Базовое исключение релея."""


class BrokerUnavailable(RelayError):
    """Не удалось установить соединение или открыть канал с брокером."""


class PublishFailure(RelayError):
    """Соединение есть, но отправка сообщения завершилась ошибкой."""

    def __init__(self, topic: str, reason: str) -> None:
        self.topic = topic
        self.reason = reason
        super().__init__(f"Не удалось опубликовать в '{topic}': {reason}")


class MalformedEvent(RelayError):
    """Сообщение из очереди не удалось десериализовать."""

    def __init__(self, topic: str, body: bytes, reason: str) -> None:
        self.topic = topic
        self.body = body
        self.reason = reason
        super().__init__(f"Некорректное сообщение в '{topic}': {reason}")

    @property
    def preview(self) -> str:
        """Начало тела сообщения для логов."""
        return self.body[:200].decode("utf-8", errors="replace")


class StaleResolution(RelayError):
    """
    Попытка завершить уже завершённого ожидающего.

    Реестры не бросают его наружу: повторное завершение — безопасный no-op,
    который возвращает False.
    """


class DuplicateHandlerError(RelayError):
    """На топик уже зарегистрирован обработчик."""

    def __init__(self, topic: str) -> None:
        self.topic = topic
        super().__init__(f"Обработчик для топика '{topic}' уже зарегистрирован")
