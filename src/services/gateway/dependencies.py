# src/services/gateway/dependencies.py
"""
Dependency Injection для Gateway.
Экземпляры живут в app.state; трасса создаётся заново на каждый запрос.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from src.common.constants import MALFORMED_HEADER_MESSAGE
from src.common.errors import AuthenticationError, InternalError
from src.services.gateway.auth_client import AuthServiceClient
from src.services.gateway.context import CallerContext, RequestState, RequestTrace
from src.services.gateway.service import GatewayService
from src.shared.security import parse_bearer


def get_gateway_service(request: Request) -> GatewayService:
    service = getattr(request.app.state, "gateway_service", None)
    if service is None:
        raise RuntimeError("GatewayService не инициализирован")
    return service


def get_auth_client(request: Request) -> AuthServiceClient:
    client = getattr(request.app.state, "auth_client", None)
    if client is None:
        raise RuntimeError("AuthServiceClient не инициализирован")
    return client


def get_request_trace(request: Request) -> RequestTrace:
    """Одна трасса на запрос: FastAPI кэширует зависимость в пределах запроса."""
    return RequestTrace(f"{request.method} {request.url.path}")


async def authenticate(
    authorization: Annotated[str | None, Header()] = None,
    trace: RequestTrace = Depends(get_request_trace),
    auth_client: AuthServiceClient = Depends(get_auth_client),
) -> CallerContext:
    """
    Проверяет Bearer токен через Auth Service.
    Кривой заголовок отклоняется сразу, без обращения к Auth Service.
    """
    await trace.advance(RequestState.AUTHENTICATING)

    if authorization is None or parse_bearer(authorization) is None:
        await trace.advance(RequestState.REJECTED)
        raise AuthenticationError(MALFORMED_HEADER_MESSAGE)

    try:
        identity = await auth_client.verify(authorization)
    except AuthenticationError:
        await trace.advance(RequestState.REJECTED)
        raise
    except InternalError:
        await trace.advance(RequestState.FAILED)
        raise

    await trace.advance(RequestState.AUTHENTICATED)
    return CallerContext(identity=identity, authorization=authorization)
