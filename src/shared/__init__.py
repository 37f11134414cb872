# src/shared/__init__.py
"""
Общий код между сервисами.

Модули:
- events: схемы событий RabbitMQ
- models: общие DTO и Pydantic-модели
"""

__all__: list[str] = []
