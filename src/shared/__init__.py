# src/shared/__init__.py
"""
Общий код между микросервисами.

Модули:
- models: общие DTO и Pydantic-модели
- events: публикация доменных событий и log-only подписчики
- security: разбор Bearer заголовка
"""

__all__: list[str] = []
