from fastapi import APIRouter, Depends, status

from src.common.constants import UserEndpoints
from src.services.users_service.dependencies import get_user_service
from src.services.users_service.service import UserService
from src.shared.ids import parse_path_id
from src.shared.models.user_dto import CreateUserRequest, UserDTO

router = APIRouter(tags=["users"])


@router.post(UserEndpoints.CREATE, response_model=UserDTO, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: CreateUserRequest,
    service: UserService = Depends(get_user_service),
):
    return await service.create_user(user_data)


@router.get(UserEndpoints.GET_BY_ID, response_model=UserDTO)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
):
    """Путь приходит строкой, чтобы ответить единым сообщением об ошибке."""
    return await service.get_user(parse_path_id(user_id))
