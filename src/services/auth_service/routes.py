# src/services/auth_service/routes.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header

from src.common.constants import AuthEndpoints
from src.services.auth_service.dependencies import get_auth_service
from src.services.auth_service.service import AuthService
from src.shared.models.auth_dto import IdentityClaims, LoginRequest, TokenResponse

router = APIRouter(tags=["auth"])


@router.post(AuthEndpoints.LOGIN, response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    return await service.login(credentials)


@router.get(AuthEndpoints.VALIDATE, response_model=IdentityClaims)
async def validate(
    authorization: Annotated[str | None, Header()] = None,
    service: AuthService = Depends(get_auth_service),
):
    """Возвращает claims токена из заголовка Authorization."""
    return await service.validate(authorization)
