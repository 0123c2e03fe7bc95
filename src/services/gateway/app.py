# src/services/gateway/app.py
"""
FastAPI приложение Gateway.

Endpoints:
- GET /health - локально, без условий
- POST /login - прокси в Auth Service, без аутентификации
- POST /users - Users Service
- GET /users/{userId} - Users Service
- POST /orders - Orders Service, userId из токена
- GET /orders/user - заказы вызывающего
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from src.common.constants import GatewayEndpoints, ServiceName, TypeMsg
from src.common.errors import register_exception_handlers
from src.common.logger import log_info, setup_logging
from src.config import settings
from src.config.loader import Settings
from src.services.gateway.auth_client import AuthServiceClient
from src.services.gateway.proxy import UpstreamProxy
from src.services.gateway.routes import router
from src.services.gateway.service import GatewayService, UpstreamUrls
from src.shared.models.common import HealthStatus


def build_gateway(
    http: httpx.AsyncClient,
    config: Settings,
) -> tuple[AuthServiceClient, GatewayService]:
    """Собирает клиент Auth Service и маршрутизатор поверх одного HTTP клиента."""
    proxy = UpstreamProxy(
        http,
        retry_attempts=config.gateway.UPSTREAM_RETRY_ATTEMPTS,
        retry_delay=config.gateway.UPSTREAM_RETRY_DELAY,
    )
    urls = UpstreamUrls.from_settings(config.deployment)
    return AuthServiceClient(proxy, urls.auth), GatewayService(proxy, urls)


def create_app(
    http_client: httpx.AsyncClient | None = None,
    config: Settings | None = None,
) -> FastAPI:
    """
    Создаёт приложение.
    Переданный http_client (в тестах - с MockTransport/ASGITransport)
    используется как есть и не закрывается приложением.
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        await log_info("Запуск Gateway...", type_msg=TypeMsg.INFO)

        owned_client: httpx.AsyncClient | None = None
        if app.state.gateway_service is None:
            owned_client = httpx.AsyncClient(timeout=config.gateway.UPSTREAM_TIMEOUT)
            app.state.auth_client, app.state.gateway_service = build_gateway(owned_client, config)

        try:
            yield
        finally:
            await log_info("Остановка Gateway...", type_msg=TypeMsg.INFO)
            if owned_client is not None:
                await owned_client.aclose()

    app = FastAPI(
        title="Gateway",
        description="Единая точка входа: аутентификация и проксирование",
        version=config.system.VERSION,
        lifespan=lifespan,
    )
    app.state.auth_client = None
    app.state.gateway_service = None
    if http_client is not None:
        app.state.auth_client, app.state.gateway_service = build_gateway(http_client, config)

    register_exception_handlers(app)
    app.include_router(router)

    @app.get(GatewayEndpoints.HEALTH, response_model=HealthStatus)
    async def health_check():
        return HealthStatus(service=ServiceName.GATEWAY.value, version=config.system.VERSION)

    return app


app = create_app()
