# src/shared/security.py
"""
Разбор заголовка Authorization.
"""

from __future__ import annotations

from src.common.constants import BEARER_PREFIX


def parse_bearer(authorization: str | None) -> str | None:
    """
    Возвращает токен из "Bearer <token>".
    None, если заголовка нет или он не в формате Bearer.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None
