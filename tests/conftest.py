# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from collections import defaultdict
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("JWT_SECRET", "test-secret-value-that-is-long-enough-for-hs256")
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")

from src.infra.event_bus import DomainEvent, EventHandler
from src.services.auth_service.service import AuthService, Credential
from src.services.auth_service.tokens import TokenService
from src.shared.models.order_dto import CreateOrderRequest, OrderDTO
from src.shared.models.user_dto import CreateUserRequest, UserDTO


TEST_SECRET = os.environ["JWT_SECRET"]


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "PROJECT_NAME": "orderflow_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "COMPONENT_MODE": "gateway",
        "AUTH_SERVICE_HOST": "auth.test",
        "AUTH_SERVICE_PORT": 3000,
        "USERS_SERVICE_HOST": "users.test",
        "USERS_SERVICE_PORT": 3001,
        "ORDERS_SERVICE_HOST": "orders.test",
        "ORDERS_SERVICE_PORT": 3002,
        "GATEWAY_HOST": "127.0.0.1",
        "GATEWAY_PORT": 3003,
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "colored",
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "orderflow_test",
        "DB_USER": "postgres",
        "DB_MIN_POOL_SIZE": 1,
        "DB_MAX_POOL_SIZE": 5,
        "DB_RETRY_ATTEMPTS": 2,
        "DB_RETRY_DELAY": 0.0,
        "REDIS_HOST": "localhost",
        "REDIS_PORT": 6379,
        "REDIS_DB": 1,
        "REDIS_MAX_CONNECTIONS": 10,
        "JWT_ALGORITHM": "HS256",
        "TOKEN_TTL_SECONDS": 3600,
        "DEMO_USER_ID": 1,
        "DEMO_USERNAME": "admin",
        "DEMO_ROLE": "user",
        "UPSTREAM_TIMEOUT": 2.0,
        "UPSTREAM_RETRY_ATTEMPTS": 2,
        "UPSTREAM_RETRY_DELAY": 0.0,
    }


# =============================================================================
# IN-MEMORY ЗАМЕНЫ ИНФРАСТРУКТУРЫ
# =============================================================================

class InMemoryEventBus:
    """Шина событий в памяти: доставка подписчикам прямо внутри publish."""

    def __init__(self) -> None:
        self.handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self.published: list[DomainEvent] = []

    async def publish(self, channel: str, message: bytes | str) -> int:
        payload = message if isinstance(message, bytes) else message.encode("utf-8")
        event = DomainEvent(channel=channel, payload=payload)
        self.published.append(event)
        for handler in list(self.handlers[channel]):
            await handler(event)
        return len(self.handlers[channel])

    async def subscribe(self, channel: str, handler: EventHandler) -> None:
        self.handlers[channel].append(handler)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.rows: dict[int, UserDTO] = {}

    async def create(self, user: CreateUserRequest) -> UserDTO:
        created = UserDTO(id=len(self.rows) + 1, name=user.name, email=user.email)
        self.rows[created.id] = created
        return created

    async def get_by_id(self, user_id: int) -> Optional[UserDTO]:
        return self.rows.get(user_id)


class InMemoryOrderRepository:
    def __init__(self) -> None:
        self.rows: list[OrderDTO] = []

    async def create(self, order: CreateOrderRequest) -> OrderDTO:
        created = OrderDTO(
            id=len(self.rows) + 1,
            user_id=order.user_id,
            item=order.item,
            quantity=order.quantity,
        )
        self.rows.append(created)
        return created

    async def list_by_user(self, user_id: int) -> list[OrderDTO]:
        return [o for o in self.rows if o.user_id == user_id]


@pytest.fixture
def memory_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """Мок менеджера базы данных."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="INSERT 0 1")
    db.fetchval = AsyncMock(return_value=None)
    return db


@pytest.fixture
def mock_event_bus() -> AsyncMock:
    """Мок шины событий."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=1)
    event_bus.subscribe = AsyncMock(return_value=None)
    event_bus.is_connected = True
    return event_bus


# =============================================================================
# ФИКСТУРЫ АУТЕНТИФИКАЦИИ
# =============================================================================

@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, default_ttl=3600)


@pytest.fixture
def demo_credential() -> Credential:
    return Credential(user_id=1, username="admin", password="password", role="user")


@pytest.fixture
def auth_service(token_service: TokenService, demo_credential: Credential) -> AuthService:
    return AuthService(token_service, demo_credential)
