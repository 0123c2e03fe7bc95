# src/shared/events/__init__.py
"""
Доменные события Redis Pub/Sub.

Каналы:
- user:created - создан пользователь
- order:created - создан заказ

Полезная нагрузка - JSON созданной сущности, как в ответе клиенту.
"""

from src.shared.events.base import (
    make_log_handler,
    publish_created,
    serialize_entity,
    start_log_subscriber,
)

__all__ = [
    "make_log_handler",
    "publish_created",
    "serialize_entity",
    "start_log_subscriber",
]
