# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ServiceName(str, Enum):
    """Имена сервисов (режимы запуска main.py)."""
    AUTH = "auth_service"
    USERS = "users_service"
    ORDERS = "orders_service"
    GATEWAY = "gateway"
    ALL = "all"


class EventChannels:
    """Каналы доменных событий."""
    USER_CREATED = "user:created"
    ORDER_CREATED = "order:created"


class AuthEndpoints:
    """Пути auth-сервиса."""
    LOGIN = "/login"
    VALIDATE = "/validate"


class UserEndpoints:
    """Пути users-сервиса."""
    CREATE = "/users"
    GET_BY_ID = "/users/{user_id}"


class OrderEndpoints:
    """Пути orders-сервиса."""
    CREATE = "/orders"
    LIST_BY_USER = "/orders/user/{user_id}"


BEARER_PREFIX = "Bearer "
MALFORMED_HEADER_MESSAGE = "Missing or malformed authorization header"

# Диапазон колонок id/user_id (INTEGER в PostgreSQL)
INT4_MIN = -(2**31)
INT4_MAX = 2**31 - 1


class GatewayEndpoints:
    """Публичные пути gateway."""
    HEALTH = "/health"
    LOGIN = "/login"
    USERS = "/users"
    USER_BY_ID = "/users/{user_id}"
    ORDERS = "/orders"
    USER_ORDERS = "/orders/user"
