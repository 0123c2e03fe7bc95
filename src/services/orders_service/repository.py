# src/services/orders_service/repository.py
from __future__ import annotations

from typing import List

import asyncpg

from src.common.errors import InternalError
from src.common.logger import log_error
from src.infra.database import CONNECTION_ERRORS, DatabaseManager
from src.shared.ids import fits_int4
from src.shared.models.order_dto import CreateOrderRequest, OrderDTO

STORAGE_ERRORS: tuple[type[BaseException], ...] = (asyncpg.PostgresError, *CONNECTION_ERRORS)


class OrderRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create(self, order: CreateOrderRequest) -> OrderDTO:
        """Сохраняет заказ. id назначает база."""
        query = """
            INSERT INTO orders (user_id, item, quantity)
            VALUES ($1, $2, $3)
            RETURNING id, user_id, item, quantity
        """
        try:
            async with self.db.acquire() as conn:
                record = await conn.fetchrow(query, order.user_id, order.item, order.quantity)
        except STORAGE_ERRORS as e:
            await log_error(f"Ошибка сохранения заказа: {e!r}", exc_info=True)
            raise InternalError() from e
        return OrderDTO.model_validate(dict(record))

    async def list_by_user(self, user_id: int) -> List[OrderDTO]:
        """Все заказы пользователя, по возрастанию id."""
        if not fits_int4(user_id):
            return []
        query = """
            SELECT id, user_id, item, quantity
            FROM orders
            WHERE user_id = $1
            ORDER BY id
        """
        try:
            async with self.db.acquire() as conn:
                records = await conn.fetch(query, user_id)
        except STORAGE_ERRORS as e:
            await log_error(f"Ошибка чтения заказов пользователя {user_id}: {e!r}", exc_info=True)
            raise InternalError() from e
        return [OrderDTO.model_validate(dict(r)) for r in records]
