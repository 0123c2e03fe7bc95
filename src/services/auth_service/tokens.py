# src/services/auth_service/tokens.py
"""
Подписанные токены идентичности (JWT, HS256).

Токен не хранится нигде: проверяется подпись общим секретом и срок действия.
Issuer/audience не проверяются.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import ValidationError as PydanticValidationError

from src.shared.models.auth_dto import IdentityClaims


class TokenError(Exception):
    """Базовая ошибка проверки токена."""


class InvalidTokenError(TokenError):
    """Подпись не совпадает, токен повреждён или claims неполные."""


class ExpiredTokenError(TokenError):
    """Срок действия токена истёк."""


class TokenConfigError(Exception):
    """Секрет подписи не задан. Фатально при старте сервиса."""


class TokenService:
    """Выпуск и проверка токенов на общем секрете."""

    def __init__(self, secret: str, algorithm: str = "HS256", default_ttl: int = 3600) -> None:
        if not secret:
            raise TokenConfigError("JWT_SECRET не задан")
        self._secret = secret
        self._algorithm = algorithm
        self._default_ttl = default_ttl

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def sign(self, claims: IdentityClaims, ttl: int | None = None) -> str:
        """
        Подписывает claims. Срок действия: now + ttl секунд.

        Args:
            claims: Идентичность пользователя
            ttl: Время жизни в секундах (по умолчанию из конфига)
        """
        issued_at = datetime.now(timezone.utc)
        lifetime = self._default_ttl if ttl is None else ttl
        payload = {
            **claims.model_dump(),
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=lifetime),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> IdentityClaims:
        """
        Проверяет подпись и срок действия.

        Raises:
            ExpiredTokenError: Срок действия истёк
            InvalidTokenError: Любая другая проблема с токеном
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        try:
            return IdentityClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise InvalidTokenError("Token claims are incomplete") from e
