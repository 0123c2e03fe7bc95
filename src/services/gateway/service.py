# src/services/gateway/service.py
"""
Маршрутизация gateway: каждый защищённый маршрут соответствует ровно
одной операции доменного сервиса.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from src.common.constants import AuthEndpoints, OrderEndpoints, UserEndpoints
from src.common.errors import InternalError, UpstreamError, ValidationError
from src.services.gateway.context import CallerContext, RequestState, RequestTrace
from src.services.gateway.proxy import UpstreamProxy, UpstreamResponse

if TYPE_CHECKING:
    from src.config.loader import DeploymentSettings


# Сообщения 500, когда сервис не ответил вовсе
LOGIN_FAILED = "Gateway encountered an error during login."
CREATE_USER_FAILED = "Gateway error creating user."
GET_USER_FAILED = "Gateway error fetching user."
CREATE_ORDER_FAILED = "Gateway error creating order."
LIST_ORDERS_FAILED = "Gateway error fetching orders."


@dataclass(frozen=True)
class UpstreamUrls:
    auth: str
    users: str
    orders: str

    @classmethod
    def from_settings(cls, deployment: "DeploymentSettings") -> "UpstreamUrls":
        return cls(
            auth=deployment.auth_service_url,
            users=deployment.users_service_url,
            orders=deployment.orders_service_url,
        )


def _path_param(value: Any) -> str:
    return quote(str(value), safe="")


class GatewayService:
    def __init__(self, proxy: UpstreamProxy, urls: UpstreamUrls) -> None:
        self.proxy = proxy
        self.urls = urls

    async def _relay(
        self,
        trace: RequestTrace,
        method: str,
        url: str,
        *,
        failure_message: str,
        **kwargs: Any,
    ) -> UpstreamResponse:
        await trace.advance(RequestState.FORWARDING)
        try:
            result = await self.proxy.forward(method, url, failure_message=failure_message, **kwargs)
        except UpstreamError:
            # Ошибка сервиса отдаётся клиенту как есть
            await trace.advance(RequestState.RELAYED)
            raise
        except InternalError:
            await trace.advance(RequestState.FAILED)
            raise
        await trace.advance(RequestState.RELAYED)
        return result

    async def login(self, body: bytes, content_type: str | None, trace: RequestTrace) -> UpstreamResponse:
        """Без аутентификации: так клиент и получает токен."""
        return await self._relay(
            trace,
            "POST",
            f"{self.urls.auth}{AuthEndpoints.LOGIN}",
            failure_message=LOGIN_FAILED,
            content=body,
            content_type=content_type,
        )

    async def create_user(
        self,
        caller: CallerContext,
        body: bytes,
        content_type: str | None,
        trace: RequestTrace,
    ) -> UpstreamResponse:
        return await self._relay(
            trace,
            "POST",
            f"{self.urls.users}{UserEndpoints.CREATE}",
            failure_message=CREATE_USER_FAILED,
            authorization=caller.authorization,
            content=body,
            content_type=content_type,
        )

    async def get_user(self, caller: CallerContext, user_id: str, trace: RequestTrace) -> UpstreamResponse:
        path = UserEndpoints.GET_BY_ID.format(user_id=_path_param(user_id))
        return await self._relay(
            trace,
            "GET",
            f"{self.urls.users}{path}",
            failure_message=GET_USER_FAILED,
            authorization=caller.authorization,
        )

    async def create_order(self, caller: CallerContext, body: bytes, trace: RequestTrace) -> UpstreamResponse:
        """
        userId всегда берётся из проверенной идентичности.
        Значение из тела клиента перезаписывается.
        """
        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            raise ValidationError(details=[{"field": "body", "message": "Expected a JSON object"}])

        payload["userId"] = caller.user_id

        return await self._relay(
            trace,
            "POST",
            f"{self.urls.orders}{OrderEndpoints.CREATE}",
            failure_message=CREATE_ORDER_FAILED,
            authorization=caller.authorization,
            json=payload,
        )

    async def list_own_orders(self, caller: CallerContext, trace: RequestTrace) -> UpstreamResponse:
        """Заказы самого вызывающего; чужой userId через gateway не запросить."""
        path = OrderEndpoints.LIST_BY_USER.format(user_id=_path_param(caller.user_id))
        return await self._relay(
            trace,
            "GET",
            f"{self.urls.orders}{path}",
            failure_message=LIST_ORDERS_FAILED,
            authorization=caller.authorization,
        )
