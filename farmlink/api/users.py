"""User directory endpoints."""

from fastapi import APIRouter, Request

from ..dependencies import CallDirectoryDep
from ..directory import CallDirectory
from ..error_types import ErrorMessages
from ..exceptions import ResourceNotFoundError, create_context_from_request
from ..models import UserRole
from ..schemas import UserRead
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

user_router = APIRouter(prefix="/api/users", tags=["users"])


@user_router.get("/specialists", response_model=list[UserRead])
async def list_specialists(directory: CallDirectory = CallDirectoryDep) -> list[UserRead]:
    """All specialists a farmer can book."""
    specialists = await directory.get_users_by_role(UserRole.SPECIALIST)
    return [UserRead.from_user(user) for user in specialists]


@user_router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, request: Request, directory: CallDirectory = CallDirectoryDep) -> UserRead:
    user = await directory.get_user(user_id)
    if user is None:
        context = create_context_from_request(request)
        context.user_id = user_id
        raise ResourceNotFoundError(
            f"user {user_id} not found",
            context=context,
            resource_type="user",
            resource_id=user_id,
            user_friendly=ErrorMessages.USER_NOT_FOUND,
        )
    return UserRead.from_user(user)
