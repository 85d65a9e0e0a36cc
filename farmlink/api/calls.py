"""
Call scheduling endpoints.

Calls are created here and read back by either participant. The signaling
relay changes a live call's status over the WebSocket; PATCH /status is the
equivalent for clients outside a call.
"""

from fastapi import APIRouter, Request, status

from ..dependencies import CallDirectoryDep
from ..directory import CallDirectory
from ..error_types import ErrorMessages
from ..exceptions import ResourceNotFoundError, create_context_from_request
from ..models import Call, User, UserRole
from ..schemas import CallCreate, CallRead, CallStatusUpdate, CallWithParticipants, UserSummary
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

call_router = APIRouter(prefix="/api/calls", tags=["calls"])


def _not_found(request: Request, message: str, resource_type: str, resource_id: int) -> ResourceNotFoundError:
    """Rendered as a 404 by the FarmLinkError handler."""
    return ResourceNotFoundError(
        f"{resource_type} {resource_id} not found",
        context=create_context_from_request(request),
        resource_type=resource_type,
        resource_id=resource_id,
        user_friendly=message,
    )


async def _with_participants(directory: CallDirectory, calls: list[Call]) -> list[CallWithParticipants]:
    """Attach farmer and specialist summaries, looking each user up once."""
    users: dict[int, User | None] = {}
    for call in calls:
        for user_id in (call.farmer_id, call.specialist_id):
            if user_id not in users:
                users[user_id] = await directory.get_user(user_id)

    def summary(user_id: int) -> UserSummary | None:
        user = users.get(user_id)
        return UserSummary.model_validate(user) if user is not None else None

    return [
        CallWithParticipants.model_validate(call).model_copy(
            update={"farmer": summary(call.farmer_id), "specialist": summary(call.specialist_id)}
        )
        for call in calls
    ]


@call_router.post("", response_model=CallRead, status_code=status.HTTP_201_CREATED)
async def create_call(payload: CallCreate, directory: CallDirectory = CallDirectoryDep) -> CallRead:
    call = await directory.create_call(payload)
    return CallRead.model_validate(call)


@call_router.get("/user/{user_id}", response_model=list[CallWithParticipants])
async def list_user_calls(
    user_id: int, request: Request, directory: CallDirectory = CallDirectoryDep
) -> list[CallWithParticipants]:
    """Calls for a user; farmers see calls they booked, specialists calls assigned to them."""
    user = await directory.get_user(user_id)
    if user is None:
        raise _not_found(request, ErrorMessages.USER_NOT_FOUND, "user", user_id)

    if user.role == UserRole.FARMER.value:
        calls = await directory.get_calls_by_farmer(user_id)
    else:
        calls = await directory.get_calls_by_specialist(user_id)
    return await _with_participants(directory, calls)


@call_router.get("/{call_id}", response_model=CallRead)
async def get_call(call_id: int, request: Request, directory: CallDirectory = CallDirectoryDep) -> CallRead:
    call = await directory.get_call(call_id)
    if call is None:
        raise _not_found(request, ErrorMessages.CALL_NOT_FOUND, "call", call_id)
    return CallRead.model_validate(call)


@call_router.patch("/{call_id}/status", response_model=CallRead)
async def update_call_status(
    call_id: int, payload: CallStatusUpdate, request: Request, directory: CallDirectory = CallDirectoryDep
) -> CallRead:
    call = await directory.update_call_status(call_id, payload.status)
    if call is None:
        raise _not_found(request, ErrorMessages.CALL_NOT_FOUND, "call", call_id)
    return CallRead.model_validate(call)
