# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели для межсервисного взаимодействия.
"""

from src.shared.models.auth_dto import (
    IdentityClaims,
    LoginRequest,
    TokenResponse,
)
from src.shared.models.user_dto import (
    CreateUserRequest,
    UserDTO,
)
from src.shared.models.order_dto import (
    CreateOrderRequest,
    OrderDTO,
)
from src.shared.models.common import (
    ErrorResponse,
    HealthStatus,
)

__all__ = [
    # Auth
    "IdentityClaims",
    "LoginRequest",
    "TokenResponse",
    # User
    "CreateUserRequest",
    "UserDTO",
    # Order
    "CreateOrderRequest",
    "OrderDTO",
    # Common
    "ErrorResponse",
    "HealthStatus",
]
