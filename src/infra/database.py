# src/infra/database.py
"""
Менеджер базы данных PostgreSQL.
Пул соединений asyncpg, повтор подключения при старте, применение схемы.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, AsyncGenerator, AsyncIterator

import asyncpg
from asyncpg import Connection, Pool, Record

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info, log_warning
from src.common.retry import retry_async

if TYPE_CHECKING:
    from src.config.loader import Settings


# Ошибки, после которых подключение имеет смысл повторить
CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
    asyncpg.InterfaceError,
    ConnectionRefusedError,
    OSError,
)

# Произвольный ключ advisory lock для миграций
SCHEMA_LOCK_ID = 723405811


class DatabaseManager:
    """
    Менеджер подключений к PostgreSQL.
    Один экземпляр на процесс сервиса, создаётся в lifespan приложения.
    """

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: int = 30,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._retry_attempts = retry_attempts
        self._retry_delay = retry_delay
        self._pool: Pool | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DatabaseManager":
        db = settings.database
        return cls(
            db.dsn,
            min_size=db.DB_MIN_POOL_SIZE,
            max_size=db.DB_MAX_POOL_SIZE,
            command_timeout=db.DB_COMMAND_TIMEOUT,
            retry_attempts=db.DB_RETRY_ATTEMPTS,
            retry_delay=db.DB_RETRY_DELAY,
        )

    @property
    def pool(self) -> Pool:
        """Возвращает пул соединений."""
        if self._pool is None:
            raise RuntimeError("Пул соединений не инициализирован. Вызовите connect() сначала.")
        return self._pool

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Создаёт пул соединений, повторяя попытку при недоступности БД."""
        if self._pool is not None:
            return

        await log_info("Подключение к PostgreSQL...", type_msg=TypeMsg.INFO)

        self._pool = await retry_async(
            lambda: asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
            ),
            attempts=self._retry_attempts,
            delay=self._retry_delay,
            retry_on=CONNECTION_ERRORS,
            description="Подключение к PostgreSQL",
        )

        await log_info("Подключение к PostgreSQL установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает пул соединений."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            await log_info("Соединение с PostgreSQL закрыто", type_msg=TypeMsg.INFO)

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[Connection, None]:
        """
        Контекстный менеджер для получения соединения из пула.

        Example:
            async with db.acquire() as conn:
                row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", 1)
        """
        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args: Any) -> str:
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[Record]:
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Record | None:
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any, column: int = 0) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column)

    async def health_check(self) -> bool:
        """
        Проверяет здоровье подключения к БД.

        Returns:
            True если подключение работает
        """
        try:
            result = await self.fetchval("SELECT 1")
        except (asyncpg.PostgresError, RuntimeError, *CONNECTION_ERRORS) as e:
            await log_error(f"Health check PostgreSQL failed: {e}")
            return False
        return result == 1

    async def init_schema(self, schema_path: Path) -> None:
        """
        Применяет SQL схему под advisory lock.
        DDL в файле идемпотентен, поэтому параллельный старт сервисов безопасен.
        """
        if not schema_path.exists():
            await log_error(f"Файл схемы БД не найден: {schema_path}")
            raise FileNotFoundError(schema_path)

        schema_sql = schema_path.read_text(encoding="utf-8")

        await log_info("Применение схемы БД...", type_msg=TypeMsg.INFO)
        try:
            async with self.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock($1)", SCHEMA_LOCK_ID)
                    await conn.execute(schema_sql)
        except (asyncpg.DeadlockDetectedError, asyncpg.DuplicateObjectError, asyncpg.DuplicateTableError) as e:
            # Гонка двух процессов, схема уже применена другим
            await log_warning(f"Схема БД уже применяется другим процессом: {e}")
            return

        await log_info("Схема БД успешно применена", type_msg=TypeMsg.INFO)


def get_schema_path() -> Path:
    from src.config.loader import get_project_root

    return get_project_root() / "migrations" / "init.sql"


@asynccontextmanager
async def open_database(settings: "Settings", *, apply_schema: bool = True) -> AsyncIterator[DatabaseManager]:
    """
    Открывает пул на время жизни сервиса.
    На выходе пул закрывается даже при ошибке старта.
    """
    db = DatabaseManager.from_settings(settings)
    await db.connect()
    try:
        if apply_schema:
            await db.init_schema(get_schema_path())
        await log_info(
            f"PostgreSQL подключён: {settings.database.DB_HOST}:{settings.database.DB_PORT}/{settings.database.DB_NAME}",
            type_msg=TypeMsg.INFO,
        )
        yield db
    finally:
        await db.disconnect()
