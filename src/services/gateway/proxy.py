# src/services/gateway/proxy.py
"""
HTTP прокси gateway к внутренним сервисам.

- Таймаут задаётся на общем httpx.AsyncClient
- Повтор только для ошибок, при которых запрос не дошёл до сервиса
- 2xx ретранслируется как есть (статус, байты, content-type)
- не-2xx поднимается как UpstreamError и тоже ретранслируется как есть
- нет ответа вовсе -> InternalError с сообщением конкретного маршрута
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import Response

from src.common.errors import InternalError, UpstreamError
from src.common.logger import log_error, log_warning
from src.common.retry import retry_async


# Запрос гарантированно не был доставлен: повтор безопасен даже для POST
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
)


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    content: bytes
    media_type: str | None = None

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "UpstreamResponse":
        return cls(
            status_code=response.status_code,
            content=response.content,
            media_type=response.headers.get("content-type"),
        )

    def to_response(self) -> Response:
        return Response(content=self.content, status_code=self.status_code, media_type=self.media_type)


class UpstreamProxy:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        retry_attempts: int = 1,
        retry_delay: float = 0.0,
    ) -> None:
        self.http = http
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

    async def send(
        self,
        method: str,
        url: str,
        *,
        failure_message: str,
        authorization: str | None = None,
        content: bytes | None = None,
        content_type: str | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Отправляет запрос и возвращает ответ с любым статусом.

        Raises:
            InternalError: Сервис недоступен или не ответил
        """
        headers: dict[str, str] = {}
        if authorization is not None:
            headers["Authorization"] = authorization
        if content_type is not None and json is None:
            headers["Content-Type"] = content_type

        try:
            return await retry_async(
                lambda: self.http.request(method, url, headers=headers, content=content, json=json),
                attempts=self.retry_attempts,
                delay=self.retry_delay,
                retry_on=RETRYABLE_ERRORS,
                description=f"{method} {url}",
            )
        except httpx.HTTPError as e:
            # Клиенту уходит только сообщение маршрута
            await log_error(f"Upstream {method} {url} недоступен: {e.__class__.__name__}: {e}")
            raise InternalError(failure_message) from e

    async def forward(self, method: str, url: str, *, failure_message: str, **kwargs: Any) -> UpstreamResponse:
        """
        Проксирует запрос.

        Raises:
            UpstreamError: Сервис ответил не-2xx
            InternalError: Сервис недоступен
        """
        response = await self.send(method, url, failure_message=failure_message, **kwargs)
        relayed = UpstreamResponse.from_httpx(response)

        if response.is_success:
            return relayed

        await log_warning(f"Upstream {method} {url} ответил {response.status_code}")
        raise UpstreamError(relayed.status_code, relayed.content, relayed.media_type)
