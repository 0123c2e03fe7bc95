# src/shared/models/common.py
"""
Общие модели для всех сервисов.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    error: str
    details: Any | None = None


class HealthStatus(BaseModel):
    """Статус здоровья сервиса (liveness, без проверки зависимостей)."""

    service: str
    status: str = "healthy"
    version: str | None = None
