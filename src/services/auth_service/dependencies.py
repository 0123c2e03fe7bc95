# src/services/auth_service/dependencies.py
"""
Dependency Injection для Auth Service.
Экземпляры живут в app.state и создаются в lifespan.
"""

from __future__ import annotations

from fastapi import Request

from src.config.loader import Settings
from src.services.auth_service.service import AuthService, Credential
from src.services.auth_service.tokens import TokenService


def build_auth_service(settings: Settings) -> AuthService:
    """Собирает сервис из конфига. Без JWT_SECRET падает с TokenConfigError."""
    auth = settings.auth
    tokens = TokenService(
        auth.JWT_SECRET,
        algorithm=auth.JWT_ALGORITHM,
        default_ttl=auth.TOKEN_TTL_SECONDS,
    )
    return AuthService(tokens, Credential.from_settings(auth))


def get_auth_service(request: Request) -> AuthService:
    """Получить AuthService текущего приложения."""
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise RuntimeError("AuthService не инициализирован")
    return service
