# src/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: PostgreSQL, Redis Pub/Sub.
"""

from src.infra.database import DatabaseManager, open_database
from src.infra.redis_client import RedisClient
from src.infra.event_bus import DomainEvent, EventBus, EventBusError, open_event_bus

__all__ = [
    "DatabaseManager",
    "open_database",
    "RedisClient",
    "DomainEvent",
    "EventBus",
    "EventBusError",
    "open_event_bus",
]
