# src/common/__init__.py
"""
Общие утилиты, константы, ошибки и логгер.
"""

from src.common.logger import get_logger, log_info, log_error, log_warning, log_debug, setup_logging
from src.common.constants import TypeMsg, EventChannels
from src.common.errors import (
    AppError,
    AuthenticationError,
    InternalError,
    NotFoundError,
    UpstreamError,
    ValidationError,
    register_exception_handlers,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "TypeMsg",
    "EventChannels",
    "AppError",
    "AuthenticationError",
    "InternalError",
    "NotFoundError",
    "UpstreamError",
    "ValidationError",
    "register_exception_handlers",
]
