# src/services/auth_service/app.py
"""
FastAPI приложение Auth Service.

Endpoints:
- POST /login - токен по {username, password}
- GET /validate - claims из Bearer токена
- GET /health - liveness
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.common.constants import ServiceName, TypeMsg
from src.common.errors import register_exception_handlers
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.services.auth_service.dependencies import build_auth_service
from src.services.auth_service.routes import router
from src.services.auth_service.service import AuthService
from src.shared.models.common import HealthStatus


def create_app(auth_service: AuthService | None = None) -> FastAPI:
    """
    Создаёт приложение. Готовый auth_service подставляется в тестах,
    иначе он собирается из конфига при старте.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        await log_info("Запуск Auth Service...", type_msg=TypeMsg.INFO)
        if app.state.auth_service is None:
            # Пустой JWT_SECRET - ошибка конфигурации, сервис не стартует
            app.state.auth_service = build_auth_service(settings)

        yield

        await log_info("Остановка Auth Service...", type_msg=TypeMsg.INFO)

    app = FastAPI(
        title="Auth Service",
        description="Выпуск и проверка токенов идентичности",
        version=settings.system.VERSION,
        lifespan=lifespan,
    )
    app.state.auth_service = auth_service

    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        return HealthStatus(service=ServiceName.AUTH.value, version=settings.system.VERSION)

    return app


app = create_app()
