# src/infra/event_bus.py
"""
Шина доменных событий на базе Redis Pub/Sub.

Публикация и подписка идут через разные клиенты Redis, поэтому
долгоживущая подписка никогда не блокирует publish.

Гарантии доставки минимальные:
- at-most-once для каждого подписчика, подключённого в момент публикации
- без истории: поздний подписчик не получает прошлые события
- без порядка между каналами
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable

from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from src.common.constants import TypeMsg
from src.common.logger import log_debug, log_error, log_info, log_warning
from src.infra.redis_client import RedisClient

if TYPE_CHECKING:
    from src.config.loader import Settings


# =============================================================================
# ДОМЕННЫЕ СОБЫТИЯ
# =============================================================================

@dataclass(frozen=True)
class DomainEvent:
    """Событие, полученное из канала. payload - сериализованная сущность."""
    channel: str
    payload: bytes


class EventBusError(Exception):
    """Публикация невозможна: нет соединения с Redis."""


# Тип обработчика событий
EventHandler = Callable[[DomainEvent], Awaitable[None]]


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


class EventBus:
    """
    Шина событий на базе Redis Pub/Sub.

    Реализует:
    - Публикацию событий через клиент publisher
    - Подписку на каналы через отдельный клиент subscriber
    - Один фоновый слушатель на все подписки
    """

    def __init__(
        self,
        publisher: RedisClient,
        subscriber: RedisClient,
        url: str | None = None,
        max_connections: int = 20,
    ) -> None:
        self._publisher = publisher
        self._subscriber = subscriber
        self._url = url
        self._max_connections = max_connections
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pubsub: PubSub | None = None
        self._listener: asyncio.Task | None = None

    @property
    def is_connected(self) -> bool:
        return self._publisher.is_connected

    @property
    def channels(self) -> list[str]:
        return list(self._handlers)

    async def _ensure_connected(self, client: RedisClient) -> None:
        """Подключает клиент, если он ещё не подключён."""
        if client.is_connected:
            return
        if self._url is None:
            raise EventBusError("Нет соединения с Redis")
        try:
            await client.connect(self._url, self._max_connections)
        except (RedisError, OSError) as e:
            raise EventBusError(f"Не удалось подключиться к Redis: {e}") from e

    async def connect(self) -> None:
        """
        Подключает оба клиента при старте сервиса.
        Недоступный Redis не мешает старту: publish попробует подключиться снова.
        """
        for client in (self._publisher, self._subscriber):
            try:
                await self._ensure_connected(client)
            except EventBusError as e:
                await log_warning(f"Шина событий недоступна при старте: {e}")

    async def publish(self, channel: str, message: bytes | str) -> int:
        """
        Публикует сообщение в канал (fire-and-forget).

        Returns:
            Количество подписчиков, получивших сообщение

        Raises:
            EventBusError: Соединение с Redis не удалось установить
        """
        await self._ensure_connected(self._publisher)

        try:
            receivers = await self._publisher.publish(channel, message)
        except (RedisError, OSError) as e:
            raise EventBusError(f"Не удалось опубликовать событие {channel}: {e}") from e

        await log_debug(f"Событие {channel} опубликовано, получателей: {receivers}")
        return receivers

    async def subscribe(self, channel: str, handler: EventHandler) -> None:
        """
        Регистрирует обработчик для канала.
        Обработчик вызывается по одному разу на каждое сообщение,
        пока подписка активна.
        """
        if channel not in self._handlers:
            if self._pubsub is None:
                await self._ensure_connected(self._subscriber)
                self._pubsub = self._subscriber.pubsub()
            try:
                await self._pubsub.subscribe(channel)
            except (RedisError, OSError) as e:
                raise EventBusError(f"Не удалось подписаться на {channel}: {e}") from e
            self._handlers[channel] = []

        self._handlers[channel].append(handler)
        await log_info(f"Подписка на канал {channel}", type_msg=TypeMsg.DEBUG)

        if self._listener is None or self._listener.done():
            self._listener = asyncio.create_task(self._listen(), name="event-bus-listener")

    async def _listen(self) -> None:
        """Читает сообщения из Redis до отмены задачи."""
        pubsub = self._pubsub
        if pubsub is None:
            return
        while True:
            try:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message is None or message.get("type") != "message":
                    continue
                event = DomainEvent(
                    channel=_as_str(message.get("channel", b"")),
                    payload=_as_bytes(message.get("data", b"")),
                )
            except (RedisError, OSError) as e:
                await log_error(f"Ошибка чтения Pub/Sub: {e}")
                await asyncio.sleep(1)
                continue
            except Exception as e:
                # Слушатель единственный: без него подписки замолкают
                await log_error(f"Непредвиденная ошибка слушателя Pub/Sub: {e!r}", exc_info=True)
                await asyncio.sleep(1)
                continue

            await self._dispatch(event)

    async def _dispatch(self, event: DomainEvent) -> None:
        for handler in list(self._handlers.get(event.channel, ())):
            try:
                await handler(event)
            except Exception as e:
                # Сбой обработчика не должен останавливать слушателя
                await log_error(
                    f"Ошибка обработчика события {event.channel}: {e}",
                    exc_info=True,
                )

    async def close(self) -> None:
        """Останавливает слушателя, отписывается и закрывает оба клиента."""
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None

        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe()
                await self._pubsub.aclose()
            except (RedisError, OSError) as e:
                await log_warning(f"Ошибка при закрытии подписки: {e}")
            self._pubsub = None

        self._handlers.clear()
        await self._subscriber.disconnect()
        await self._publisher.disconnect()


@asynccontextmanager
async def open_event_bus(settings: "Settings") -> AsyncIterator[EventBus]:
    """
    Подключает publisher и subscriber на время жизни сервиса.
    На выходе всё закрывается, даже если старт прервался.
    """
    bus = EventBus(
        RedisClient("publisher"),
        RedisClient("subscriber"),
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
    )
    try:
        await bus.connect()
        yield bus
    finally:
        await bus.close()
