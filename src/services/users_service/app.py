# src/services/users_service/app.py
"""
FastAPI приложение Users Service.

Endpoints:
- POST /users - создать пользователя (201)
- GET /users/{userId} - получить пользователя (200 / 404)
- GET /health - liveness

Фоновый подписчик на user:created только логирует события.
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
from src.services.users_service.repository import UserRepository
from src.services.users_service.routes import router
from src.services.users_service.service import UserService
from src.shared.events import start_log_subscriber
from src.shared.models.common import HealthStatus

if TYPE_CHECKING:
    from src.infra.event_bus import EventBus


def create_app(
    user_service: UserService | None = None,
    event_bus: "EventBus | None" = None,
) -> FastAPI:
    """
    Создаёт приложение.
    Без user_service пул PostgreSQL и шина событий открываются в lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        await log_info("Запуск Users Service...", type_msg=TypeMsg.INFO)

        async with AsyncExitStack() as stack:
            if app.state.user_service is None:
                db = await stack.enter_async_context(open_database(settings))
                bus = await stack.enter_async_context(open_event_bus(settings))
                app.state.user_service = UserService(UserRepository(db), bus)
                app.state.event_bus = bus

            if app.state.event_bus is not None:
                await start_log_subscriber(
                    app.state.event_bus, EventChannels.USER_CREATED, ServiceName.USERS.value
                )

            yield

            await log_info("Остановка Users Service...", type_msg=TypeMsg.INFO)

    app = FastAPI(
        title="Users Service",
        description="Пользователи и событие user:created",
        version=settings.system.VERSION,
        lifespan=lifespan,
    )
    app.state.user_service = user_service
    app.state.event_bus = event_bus

    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        return HealthStatus(service=ServiceName.USERS.value, version=settings.system.VERSION)

    return app


app = create_app()
