# src/shared/models/auth_dto.py
"""
Модели аутентификации: учётные данные, токен, claims.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IdentityClaims(BaseModel):
    """
    Идентичность, зашитая в токен.
    Служебные claims (exp, iat) при разборе игнорируются.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    username: str
    role: str


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    token: str
