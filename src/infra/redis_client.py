# src/infra/redis_client.py
"""
Клиент Redis для шины событий.
Каждый экземпляр владеет собственным пулом соединений.
"""

from __future__ import annotations

import asyncio

import redis.asyncio as redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info


class RedisClient:
    """
    Асинхронный клиент Redis.

    Ответы не декодируются: полезная нагрузка событий передаётся как bytes.
    """

    def __init__(self, name: str = "redis") -> None:
        self._name = name
        self._client: redis.Redis | None = None
        # Параллельные connect() создают один пул
        self._connect_lock = asyncio.Lock()

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError(f"Redis клиент '{self._name}' не инициализирован. Вызовите connect() сначала.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self, url: str, max_connections: int = 20) -> None:
        """
        Подключается к Redis и проверяет соединение через PING.

        Args:
            url: URL Redis
            max_connections: Максимальное количество соединений в пуле
        """
        if self._client is not None:
            return

        async with self._connect_lock:
            if self._client is not None:
                return
            await self._open(url, max_connections)

    async def _open(self, url: str, max_connections: int) -> None:
        await log_info(f"Подключение к Redis ({self._name})...", type_msg=TypeMsg.INFO)

        client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=False,
        )
        try:
            await client.ping()
        except (RedisError, OSError):
            await client.aclose()
            raise

        self._client = client
        await log_info(f"Подключение к Redis ({self._name}) установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info(f"Соединение с Redis ({self._name}) закрыто", type_msg=TypeMsg.INFO)

    async def publish(self, channel: str, message: bytes | str) -> int:
        """Публикует сообщение. Возвращает число получателей."""
        return await self.client.publish(channel, message)

    def pubsub(self) -> PubSub:
        return self.client.pubsub()

    async def health_check(self) -> bool:
        """
        Проверяет здоровье подключения к Redis.

        Returns:
            True если подключение работает
        """
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError, RuntimeError) as e:
            await log_error(f"Health check Redis ({self._name}) failed: {e}")
            return False
