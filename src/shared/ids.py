# src/shared/ids.py
"""
Идентификаторы сущностей: разбор из пути и границы колонки INTEGER.
"""

from __future__ import annotations

import re

from src.common.constants import INT4_MAX, INT4_MIN
from src.common.errors import ValidationError


# Только ASCII цифры: int() принял бы и "1_0", и " 1 "
_ID_PATTERN = re.compile(r"-?[0-9]+")


def parse_path_id(raw: str, field: str = "userId") -> int:
    """
    Разбирает id из сегмента пути.

    Raises:
        ValidationError: Сегмент не является целым числом
    """
    if not _ID_PATTERN.fullmatch(raw):
        raise ValidationError(f"{field} must be a number")
    return int(raw)


def fits_int4(value: int) -> bool:
    """Значение вне диапазона не может совпасть ни с одной строкой."""
    return INT4_MIN <= value <= INT4_MAX
