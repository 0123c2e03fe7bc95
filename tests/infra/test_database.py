# tests/infra/test_database.py
"""
Тесты для менеджера базы данных.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.infra.database import DatabaseManager, SCHEMA_LOCK_ID, get_schema_path


def make_pool(conn: MagicMock) -> MagicMock:
    @asynccontextmanager
    async def acquire():
        yield conn

    pool = MagicMock()
    pool.acquire = acquire
    pool.close = AsyncMock()
    return pool


def make_connection() -> MagicMock:
    @asynccontextmanager
    async def transaction():
        yield

    conn = MagicMock()
    conn.transaction = transaction
    conn.execute = AsyncMock(return_value="OK")
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetchval = AsyncMock(return_value=1)
    return conn


class TestDatabaseManager:
    """Тесты для DatabaseManager."""

    @pytest.fixture
    def db_manager(self) -> DatabaseManager:
        return DatabaseManager("postgresql://u:p@localhost/test", retry_attempts=3, retry_delay=0)

    def test_pool_not_initialized(self, db_manager: DatabaseManager) -> None:
        with pytest.raises(RuntimeError, match="не инициализирован"):
            _ = db_manager.pool

    @pytest.mark.asyncio
    async def test_connect_creates_pool(self, db_manager: DatabaseManager) -> None:
        pool = make_pool(make_connection())

        with patch("asyncpg.create_pool", new=AsyncMock(return_value=pool)) as create_pool:
            await db_manager.connect()

        assert db_manager.pool is pool
        assert create_pool.call_args.kwargs["dsn"] == "postgresql://u:p@localhost/test"

    @pytest.mark.asyncio
    async def test_connect_retries_refused_connections(self, db_manager: DatabaseManager) -> None:
        pool = make_pool(make_connection())
        create_pool = AsyncMock(side_effect=[ConnectionRefusedError(), ConnectionRefusedError(), pool])

        with patch("asyncpg.create_pool", new=create_pool):
            await db_manager.connect()

        assert create_pool.await_count == 3
        assert db_manager.is_connected

    @pytest.mark.asyncio
    async def test_connect_gives_up_after_attempts(self, db_manager: DatabaseManager) -> None:
        create_pool = AsyncMock(side_effect=ConnectionRefusedError())

        with patch("asyncpg.create_pool", new=create_pool):
            with pytest.raises(ConnectionRefusedError):
                await db_manager.connect()

        assert create_pool.await_count == 3
        assert not db_manager.is_connected

    @pytest.mark.asyncio
    async def test_disconnect(self, db_manager: DatabaseManager) -> None:
        pool = make_pool(make_connection())
        db_manager._pool = pool

        await db_manager.disconnect()

        pool.close.assert_awaited_once()
        assert not db_manager.is_connected

    @pytest.mark.asyncio
    async def test_query_helpers_use_acquired_connection(self, db_manager: DatabaseManager) -> None:
        conn = make_connection()
        conn.fetchrow = AsyncMock(return_value={"id": 1})
        db_manager._pool = make_pool(conn)

        row = await db_manager.fetchrow("SELECT * FROM users WHERE id = $1", 1)

        assert row == {"id": 1}
        conn.fetchrow.assert_awaited_once_with("SELECT * FROM users WHERE id = $1", 1)

    @pytest.mark.asyncio
    async def test_health_check(self, db_manager: DatabaseManager) -> None:
        db_manager._pool = make_pool(make_connection())
        assert await db_manager.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_without_pool(self, db_manager: DatabaseManager) -> None:
        assert await db_manager.health_check() is False

    @pytest.mark.asyncio
    async def test_init_schema_under_advisory_lock(self, db_manager: DatabaseManager, tmp_path: Path) -> None:
        schema = tmp_path / "init.sql"
        schema.write_text("CREATE TABLE IF NOT EXISTS t (id SERIAL);", encoding="utf-8")
        conn = make_connection()
        db_manager._pool = make_pool(conn)

        await db_manager.init_schema(schema)

        calls = [c.args for c in conn.execute.await_args_list]
        assert calls[0] == ("SELECT pg_advisory_xact_lock($1)", SCHEMA_LOCK_ID)
        assert calls[1] == ("CREATE TABLE IF NOT EXISTS t (id SERIAL);",)

    @pytest.mark.asyncio
    async def test_init_schema_missing_file(self, db_manager: DatabaseManager, tmp_path: Path) -> None:
        db_manager._pool = make_pool(make_connection())

        with pytest.raises(FileNotFoundError):
            await db_manager.init_schema(tmp_path / "absent.sql")


def test_schema_file_defines_both_tables() -> None:
    sql = get_schema_path().read_text(encoding="utf-8").lower()
    assert "create table if not exists users" in sql
    assert "create table if not exists orders" in sql
