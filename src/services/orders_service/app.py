# src/services/orders_service/app.py
"""
FastAPI приложение Orders Service.

Endpoints:
- POST /orders - создать заказ (201)
- GET /orders/user/{userId} - заказы пользователя (200, пустой список если нет)
- GET /health - liveness

Фоновый подписчик на order:created только логирует события.
"""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from src.common.constants import EventChannels, ServiceName, TypeMsg
from src.common.errors import register_exception_handlers
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.infra.database import open_database
from src.infra.event_bus import open_event_bus
from src.services.orders_service.repository import OrderRepository
from src.services.orders_service.routes import router
from src.services.orders_service.service import OrderService
from src.shared.events import start_log_subscriber
from src.shared.models.common import HealthStatus

if TYPE_CHECKING:
    from src.infra.event_bus import EventBus


def create_app(
    order_service: OrderService | None = None,
    event_bus: "EventBus | None" = None,
) -> FastAPI:
    """
    Создаёт приложение.
    Без order_service пул PostgreSQL и шина событий открываются в lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        await log_info("Запуск Orders Service...", type_msg=TypeMsg.INFO)

        async with AsyncExitStack() as stack:
            if app.state.order_service is None:
                db = await stack.enter_async_context(open_database(settings))
                bus = await stack.enter_async_context(open_event_bus(settings))
                app.state.order_service = OrderService(OrderRepository(db), bus)
                app.state.event_bus = bus

            if app.state.event_bus is not None:
                await start_log_subscriber(
                    app.state.event_bus, EventChannels.ORDER_CREATED, ServiceName.ORDERS.value
                )

            yield

            await log_info("Остановка Orders Service...", type_msg=TypeMsg.INFO)

    app = FastAPI(
        title="Orders Service",
        description="Заказы и событие order:created",
        version=settings.system.VERSION,
        lifespan=lifespan,
    )
    app.state.order_service = order_service
    app.state.event_bus = event_bus

    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        return HealthStatus(service=ServiceName.ORDERS.value, version=settings.system.VERSION)

    return app


app = create_app()
