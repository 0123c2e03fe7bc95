# src/common/errors.py
"""
Таксономия ошибок приложения и обработчики исключений FastAPI.

Все сервисы возвращают ошибки в одном формате: {"error": ..., "details"?: ...}.
Исключение - UpstreamError: gateway отдаёт клиенту тело ответа сервиса как есть.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.common.logger import log_warning


INVALID_PAYLOAD_MESSAGE = "Invalid request payload"

# Части loc, которые не относятся к имени поля
_LOC_SOURCES = {"body", "path", "query", "header"}


# =============================================================================
# ИСКЛЮЧЕНИЯ
# =============================================================================

class AppError(Exception):
    """Базовая ошибка: HTTP статус, публичное сообщение и детали."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Некорректный ввод, исправимый клиентом."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = INVALID_PAYLOAD_MESSAGE


class AuthenticationError(AppError):
    """Отсутствующие, неверные или просроченные учётные данные."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(AppError):
    """Запрошенная сущность не существует."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(AppError):
    """Непредвиденный сбой. Подробности клиенту не раскрываются."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class UpstreamError(AppError):
    """
    Вызов сервиса за gateway завершился не-2xx ответом.
    Хранит исходный статус, тело и content-type для ретрансляции клиенту.
    """

    def __init__(
        self,
        status_code: int,
        body: bytes,
        media_type: str | None = None,
    ) -> None:
        super().__init__(f"Upstream responded with {status_code}")
        self.status_code = status_code
        self.body = body
        self.media_type = media_type


# =============================================================================
# ОБРАБОТЧИКИ
# =============================================================================

def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Превращает ошибки pydantic в список {field, message} по каждому полю."""
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in _LOC_SOURCES]
        details.append({
            "field": ".".join(loc) or "body",
            "message": err.get("msg", "Invalid value"),
        })
    return details


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def upstream_error_handler(request: Request, exc: UpstreamError) -> Response:
    return Response(content=exc.body, status_code=exc.status_code, media_type=exc.media_type)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = format_validation_errors(exc.errors())
    await log_warning(f"Невалидный запрос {request.method} {request.url.path}: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": INVALID_PAYLOAD_MESSAGE, "details": details},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Подключает единый формат ошибок к приложению."""
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
