# src/services/orders_service/service.py
from __future__ import annotations

from typing import TYPE_CHECKING, List

from src.common.constants import EventChannels, TypeMsg
from src.common.logger import log_info
from src.services.orders_service.repository import OrderRepository
from src.shared.events import publish_created
from src.shared.models.order_dto import CreateOrderRequest, OrderDTO

if TYPE_CHECKING:
    from src.infra.event_bus import EventBus


class OrderService:
    def __init__(self, repository: OrderRepository, event_bus: "EventBus"):
        self.repository = repository
        self.event_bus = event_bus

    async def create_order(self, order_data: CreateOrderRequest) -> OrderDTO:
        """
        Сохраняет заказ и публикует order:created.
        userId берётся из тела как есть: сервис доверяет вызывающему (gateway).
        """
        order = await self.repository.create(order_data)
        await log_info(
            f"Создан заказ {order.id} пользователя {order.user_id}",
            type_msg=TypeMsg.INFO,
        )

        await publish_created(self.event_bus, EventChannels.ORDER_CREATED, order)
        return order

    async def list_user_orders(self, user_id: int) -> List[OrderDTO]:
        """Пустой список, если заказов нет: коллекция не даёт 404."""
        return await self.repository.list_by_user(user_id)
