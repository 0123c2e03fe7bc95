# tests/infra/test_event_bus.py
"""
Тесты для шины событий на Redis Pub/Sub.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.infra.event_bus import DomainEvent, EventBus, EventBusError
from src.infra.redis_client import RedisClient


def make_client(connected: bool = True) -> MagicMock:
    client = MagicMock(spec=RedisClient)
    client.is_connected = connected
    client.publish = AsyncMock(return_value=1)
    client.connect = AsyncMock()
    client.disconnect = AsyncMock()
    return client


class FakePubSub:
    """PubSub, отдающий заранее заготовленные сообщения."""

    def __init__(self, messages: list[dict]) -> None:
        self.messages = list(messages)
        self.subscribe = AsyncMock()
        self.unsubscribe = AsyncMock()
        self.aclose = AsyncMock()

    async def get_message(self, ignore_subscribe_messages: bool = False, timeout: float = 0.0):
        if self.messages:
            return self.messages.pop(0)
        await asyncio.sleep(0.01)
        return None


class TestPublish:
    @pytest.mark.asyncio
    async def test_publish_uses_publisher_client(self) -> None:
        publisher, subscriber = make_client(), make_client()
        bus = EventBus(publisher, subscriber)

        receivers = await bus.publish("order:created", b'{"id": 1}')

        assert receivers == 1
        publisher.publish.assert_awaited_once_with("order:created", b'{"id": 1}')
        subscriber.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_publish_without_connection_raises(self) -> None:
        bus = EventBus(make_client(connected=False), make_client())

        with pytest.raises(EventBusError):
            await bus.publish("order:created", b"{}")

    @pytest.mark.asyncio
    async def test_publish_connects_lazily(self) -> None:
        publisher = make_client(connected=False)
        bus = EventBus(publisher, make_client(), url="redis://localhost:6379/0")

        await bus.publish("user:created", b"{}")

        publisher.connect.assert_awaited_once_with("redis://localhost:6379/0", 20)
        publisher.publish.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable_redis_becomes_event_bus_error(self) -> None:
        publisher = make_client(connected=False)
        publisher.connect = AsyncMock(side_effect=RedisConnectionError("refused"))
        bus = EventBus(publisher, make_client(), url="redis://localhost:6379/0")

        with pytest.raises(EventBusError):
            await bus.publish("user:created", b"{}")

    @pytest.mark.asyncio
    async def test_redis_error_during_publish(self) -> None:
        publisher = make_client()
        publisher.publish = AsyncMock(side_effect=RedisConnectionError("reset"))
        bus = EventBus(publisher, make_client())

        with pytest.raises(EventBusError):
            await bus.publish("user:created", b"{}")

    @pytest.mark.asyncio
    async def test_connect_tolerates_unavailable_redis(self) -> None:
        publisher = make_client(connected=False)
        publisher.connect = AsyncMock(side_effect=OSError("no route"))
        subscriber = make_client(connected=False)
        bus = EventBus(publisher, subscriber, url="redis://localhost:6379/0")

        await bus.connect()

        subscriber.connect.assert_awaited_once()


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_handler_receives_messages_of_its_channel(self) -> None:
        pubsub = FakePubSub([
            {"type": "message", "channel": b"order:created", "data": b'{"id": 1}'},
            {"type": "message", "channel": b"user:created", "data": b'{"id": 2}'},
        ])
        subscriber = make_client()
        subscriber.pubsub = MagicMock(return_value=pubsub)
        bus = EventBus(make_client(), subscriber)

        received: list[DomainEvent] = []
        done = asyncio.Event()

        async def handler(event: DomainEvent) -> None:
            received.append(event)
            done.set()

        await bus.subscribe("order:created", handler)
        await asyncio.wait_for(done.wait(), timeout=2)
        await asyncio.sleep(0.05)
        await bus.close()

        assert received == [DomainEvent(channel="order:created", payload=b'{"id": 1}')]
        pubsub.subscribe.assert_awaited_once_with("order:created")

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_listener(self) -> None:
        pubsub = FakePubSub([
            {"type": "message", "channel": b"user:created", "data": b"first"},
            {"type": "message", "channel": b"user:created", "data": b"second"},
        ])
        subscriber = make_client()
        subscriber.pubsub = MagicMock(return_value=pubsub)
        bus = EventBus(make_client(), subscriber)

        payloads: list[bytes] = []
        done = asyncio.Event()

        async def handler(event: DomainEvent) -> None:
            payloads.append(event.payload)
            if event.payload == b"first":
                raise RuntimeError("handler failed")
            done.set()

        await bus.subscribe("user:created", handler)
        await asyncio.wait_for(done.wait(), timeout=2)
        await bus.close()

        assert payloads == [b"first", b"second"]

    @pytest.mark.asyncio
    async def test_second_handler_same_channel_subscribes_once(self) -> None:
        pubsub = FakePubSub([])
        subscriber = make_client()
        subscriber.pubsub = MagicMock(return_value=pubsub)
        bus = EventBus(make_client(), subscriber)

        await bus.subscribe("user:created", AsyncMock())
        await bus.subscribe("user:created", AsyncMock())
        await bus.close()

        pubsub.subscribe.assert_awaited_once_with("user:created")

    @pytest.mark.asyncio
    async def test_subscribe_without_connection_raises(self) -> None:
        bus = EventBus(make_client(), make_client(connected=False))

        with pytest.raises(EventBusError):
            await bus.subscribe("user:created", AsyncMock())


@pytest.mark.asyncio
async def test_close_releases_everything() -> None:
    pubsub = FakePubSub([])
    publisher, subscriber = make_client(), make_client()
    subscriber.pubsub = MagicMock(return_value=pubsub)
    bus = EventBus(publisher, subscriber)
    await bus.subscribe("order:created", AsyncMock())

    await bus.close()

    pubsub.unsubscribe.assert_awaited_once()
    pubsub.aclose.assert_awaited_once()
    publisher.disconnect.assert_awaited_once()
    subscriber.disconnect.assert_awaited_once()
    assert bus.channels == []


class BrokenOncePubSub(FakePubSub):
    """Первый get_message падает с непредвиденной ошибкой."""

    def __init__(self, messages: list[dict]) -> None:
        super().__init__(messages)
        self.failed = False

    async def get_message(self, ignore_subscribe_messages: bool = False, timeout: float = 0.0):
        if not self.failed:
            self.failed = True
            raise RuntimeError("unexpected")
        return await super().get_message(ignore_subscribe_messages, timeout)


@pytest.mark.asyncio
async def test_listener_survives_unexpected_error() -> None:
    pubsub = BrokenOncePubSub([
        {"type": "message", "channel": b"order:created", "data": b'{"id": 1}'},
    ])
    subscriber = make_client()
    subscriber.pubsub = MagicMock(return_value=pubsub)
    bus = EventBus(make_client(), subscriber)

    done = asyncio.Event()

    async def handler(event: DomainEvent) -> None:
        done.set()

    with patch("src.infra.event_bus.log_error", new=AsyncMock()) as log_error:
        await bus.subscribe("order:created", handler)
        await asyncio.wait_for(done.wait(), timeout=5)
        await bus.close()

    assert pubsub.failed
    log_error.assert_awaited_once()


@pytest.mark.asyncio
async def test_listener_without_pubsub_returns() -> None:
    bus = EventBus(make_client(), make_client())

    await asyncio.wait_for(bus._listen(), timeout=1)
