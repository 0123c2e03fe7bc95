# src/services/users_service/repository.py
from __future__ import annotations

from typing import Optional

import asyncpg

from src.common.errors import InternalError
from src.common.logger import log_error
from src.infra.database import CONNECTION_ERRORS, DatabaseManager
from src.shared.ids import fits_int4
from src.shared.models.user_dto import CreateUserRequest, UserDTO

# Ошибки хранилища, которые превращаются в InternalError
STORAGE_ERRORS: tuple[type[BaseException], ...] = (asyncpg.PostgresError, *CONNECTION_ERRORS)


class UserRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create(self, user: CreateUserRequest) -> UserDTO:
        """Сохраняет пользователя. id назначает база."""
        query = """
            INSERT INTO users (name, email)
            VALUES ($1, $2)
            RETURNING id, name, email
        """
        try:
            async with self.db.acquire() as conn:
                record = await conn.fetchrow(query, user.name, user.email)
        except STORAGE_ERRORS as e:
            await log_error(f"Ошибка сохранения пользователя: {e!r}", exc_info=True)
            raise InternalError() from e
        return UserDTO(**dict(record))

    async def get_by_id(self, user_id: int) -> Optional[UserDTO]:
        """Получает пользователя по ID."""
        if not fits_int4(user_id):
            return None
        query = """
            SELECT id, name, email
            FROM users
            WHERE id = $1
        """
        try:
            async with self.db.acquire() as conn:
                record = await conn.fetchrow(query, user_id)
        except STORAGE_ERRORS as e:
            await log_error(f"Ошибка чтения пользователя {user_id}: {e!r}", exc_info=True)
            raise InternalError() from e
        if record:
            return UserDTO(**dict(record))
        return None
