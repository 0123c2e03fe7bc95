# src/services/users_service/dependencies.py
from fastapi import Request

from src.services.users_service.service import UserService


def get_user_service(request: Request) -> UserService:
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        raise RuntimeError("UserService не инициализирован")
    return service
