# src/services/users_service/service.py
from __future__ import annotations

from typing import TYPE_CHECKING

from src.common.constants import EventChannels, TypeMsg
from src.common.errors import NotFoundError
from src.common.logger import log_info
from src.services.users_service.repository import UserRepository
from src.shared.events import publish_created
from src.shared.models.user_dto import CreateUserRequest, UserDTO

if TYPE_CHECKING:
    from src.infra.event_bus import EventBus


class UserService:
    def __init__(self, repository: UserRepository, event_bus: "EventBus"):
        self.repository = repository
        self.event_bus = event_bus

    async def create_user(self, user_data: CreateUserRequest) -> UserDTO:
        """
        Сохраняет пользователя и публикует user:created.
        Сбой публикации не откатывает запись.
        """
        user = await self.repository.create(user_data)
        await log_info(f"Создан пользователь {user.id}", type_msg=TypeMsg.INFO)

        await publish_created(self.event_bus, EventChannels.USER_CREATED, user)
        return user

    async def get_user(self, user_id: int) -> UserDTO:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user
