# src/services/auth_service/service.py
"""
Бизнес-логика Auth Service: вход по демо-учётке и проверка токена.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.common.constants import MALFORMED_HEADER_MESSAGE, TypeMsg
from src.common.errors import AuthenticationError
from src.common.logger import log_info, log_warning
from src.services.auth_service.tokens import ExpiredTokenError, TokenError, TokenService
from src.shared.models.auth_dto import IdentityClaims, LoginRequest, TokenResponse
from src.shared.security import parse_bearer

if TYPE_CHECKING:
    from src.config.loader import AuthSettings


INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


@dataclass(frozen=True)
class Credential:
    """Статическая учётная запись (единственная в системе)."""
    user_id: int
    username: str
    password: str
    role: str

    @classmethod
    def from_settings(cls, auth: "AuthSettings") -> "Credential":
        return cls(
            user_id=auth.DEMO_USER_ID,
            username=auth.DEMO_USERNAME,
            password=auth.DEMO_PASSWORD,
            role=auth.DEMO_ROLE,
        )

    @property
    def claims(self) -> IdentityClaims:
        return IdentityClaims(id=self.user_id, username=self.username, role=self.role)


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class AuthService:
    def __init__(self, tokens: TokenService, credential: Credential) -> None:
        self.tokens = tokens
        self.credential = credential

    async def login(self, request: LoginRequest) -> TokenResponse:
        """
        Выдаёт токен при совпадении учётных данных.
        Ответ одинаков при неверном логине и при неверном пароле.
        """
        # Обе проверки выполняются всегда, без короткого замыкания
        username_ok = _same(request.username, self.credential.username)
        password_ok = _same(request.password, self.credential.password)

        if not (username_ok and password_ok):
            await log_warning("Неудачная попытка входа")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        token = self.tokens.sign(self.credential.claims)
        await log_info(f"Выдан токен пользователю {self.credential.user_id}", type_msg=TypeMsg.INFO)
        return TokenResponse(token=token)

    async def validate(self, authorization: str | None) -> IdentityClaims:
        """
        Проверяет Bearer токен и возвращает claims.

        Отсутствующий/кривой заголовок и плохой токен дают разные сообщения,
        но повреждённый, просроченный и поддельный токены неразличимы.
        """
        token = parse_bearer(authorization)
        if token is None:
            raise AuthenticationError(MALFORMED_HEADER_MESSAGE)

        try:
            return self.tokens.verify(token)
        except ExpiredTokenError:
            await log_info("Токен просрочен", type_msg=TypeMsg.DEBUG)
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from None
        except TokenError as e:
            await log_info(f"Токен отклонён: {e}", type_msg=TypeMsg.DEBUG)
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from None
