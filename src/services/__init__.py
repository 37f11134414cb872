# src/services/__init__.py
"""
HTTP-сервисы приложения.

Архитектура:
- Каждый сервис — независимое FastAPI-приложение
- Коммуникация через RabbitMQ (события) и long-poll HTTP

Сервисы:
- ride_service: создание и принятие поездок, публикация событий
- driver_service: long-poll новых поездок для водителей
- rider_service: long-poll принятия поездки для пассажира
"""

__all__: list[str] = []
