# src/common/retry.py
"""
Повтор асинхронных операций при сбоях подключения.
Линейная задержка: delay * номер попытки.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from src.common.logger import log_error, log_warning

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    delay: float,
    retry_on: tuple[type[BaseException], ...],
    description: str,
) -> T:
    """
    Выполняет operation до attempts раз.

    Повторяются только исключения из retry_on, остальные пробрасываются сразу.
    После последней неудачной попытки пробрасывается последнее исключение.

    Args:
        operation: Фабрика корутины (вызывается заново на каждой попытке)
        attempts: Максимальное количество попыток (>= 1)
        delay: Базовая задержка между попытками (секунды)
        retry_on: Типы исключений, после которых имеет смысл повторить
        description: Что выполняется (для логов)
    """
    attempts = max(1, attempts)
    last_error: BaseException | None = None

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            if attempt < attempts:
                await log_warning(f"{description}: ошибка подключения (попытка {attempt}/{attempts}): {e!r}")
                await asyncio.sleep(delay * attempt)
            else:
                await log_error(f"{description}: не удалось после {attempts} попыток: {e!r}")

    raise last_error  # type: ignore[misc]
