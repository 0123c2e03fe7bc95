# tests/shared/test_events.py
"""
Тесты публикации доменных событий и log-only подписчиков.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from src.common.constants import EventChannels
from src.infra.event_bus import DomainEvent, EventBusError
from src.shared.events import (
    make_log_handler,
    publish_created,
    serialize_entity,
    start_log_subscriber,
)
from src.shared.models import OrderDTO, UserDTO


def test_serialize_entity_uses_wire_names() -> None:
    payload = serialize_entity(OrderDTO(id=1, user_id=5, item="Book", quantity=1))
    assert json.loads(payload) == {"id": 1, "userId": 5, "item": "Book", "quantity": 1}


@pytest.mark.asyncio
async def test_publish_created_sends_entity(memory_bus) -> None:
    user = UserDTO(id=1, name="Alice", email=None)

    assert await publish_created(memory_bus, EventChannels.USER_CREATED, user) is True

    event = memory_bus.published[0]
    assert event.channel == EventChannels.USER_CREATED
    assert json.loads(event.payload) == {"id": 1, "name": "Alice", "email": None}


@pytest.mark.asyncio
async def test_publish_created_swallows_bus_errors(mock_event_bus) -> None:
    mock_event_bus.publish = AsyncMock(side_effect=EventBusError("down"))

    with patch("src.shared.events.base.log_warning", new=AsyncMock()) as warn:
        result = await publish_created(
            mock_event_bus, EventChannels.ORDER_CREATED, OrderDTO(id=1, user_id=1, item="x", quantity=1)
        )

    assert result is False
    warn.assert_awaited_once()


@pytest.mark.asyncio
async def test_log_handler_writes_payload() -> None:
    handler = make_log_handler("users_service")

    with patch("src.shared.events.base.log_info", new=AsyncMock()) as info:
        await handler(DomainEvent(channel="user:created", payload=b'{"id": 1}'))

    message = info.await_args.args[0]
    assert "[users_service]" in message
    assert 'user:created {"id": 1}' in message


@pytest.mark.asyncio
async def test_start_log_subscriber(memory_bus) -> None:
    assert await start_log_subscriber(memory_bus, EventChannels.ORDER_CREATED, "orders_service") is True
    assert len(memory_bus.handlers[EventChannels.ORDER_CREATED]) == 1


@pytest.mark.asyncio
async def test_start_log_subscriber_tolerates_failure(mock_event_bus) -> None:
    mock_event_bus.subscribe = AsyncMock(side_effect=EventBusError("down"))

    assert await start_log_subscriber(mock_event_bus, EventChannels.ORDER_CREATED, "orders_service") is False
