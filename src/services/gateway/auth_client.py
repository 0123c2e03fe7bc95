# src/services/gateway/auth_client.py
"""
Клиент проверки токена в Auth Service.
Auth Service - единственный источник истины об идентичности.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from src.common.constants import AuthEndpoints
from src.common.errors import AuthenticationError, InternalError
from src.common.logger import log_error
from src.services.gateway.proxy import UpstreamProxy
from src.shared.models.auth_dto import IdentityClaims


class AuthServiceClient:
    def __init__(self, proxy: UpstreamProxy, base_url: str) -> None:
        self.proxy = proxy
        self.base_url = base_url.rstrip("/")

    async def verify(self, authorization: str) -> IdentityClaims:
        """
        Передаёт заголовок Authorization в /validate без изменений.

        Raises:
            AuthenticationError: Auth Service отклонил токен (401)
            InternalError: Auth Service недоступен или ответил неожиданно
        """
        response = await self.proxy.send(
            "GET",
            f"{self.base_url}{AuthEndpoints.VALIDATE}",
            authorization=authorization,
            failure_message=InternalError.default_message,
        )

        if response.status_code == 401:
            raise AuthenticationError("Unauthorized")

        if not response.is_success:
            await log_error(f"Auth Service /validate ответил {response.status_code}")
            raise InternalError()

        try:
            return IdentityClaims.model_validate_json(response.content)
        except PydanticValidationError as e:
            await log_error(f"Auth Service вернул некорректные claims: {e}")
            raise InternalError() from e
