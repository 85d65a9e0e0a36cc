"""Call history endpoints."""

from fastapi import APIRouter, Request, status

from ..dependencies import CallDirectoryDep
from ..directory import CallDirectory
from ..error_types import ErrorMessages
from ..exceptions import ResourceNotFoundError, create_context_from_request
from ..schemas import CallHistoryCreate, CallHistoryRead

call_history_router = APIRouter(prefix="/api/call-history", tags=["call-history"])


@call_history_router.post("", response_model=CallHistoryRead, status_code=status.HTTP_201_CREATED)
async def create_call_history(
    payload: CallHistoryCreate, directory: CallDirectory = CallDirectoryDep
) -> CallHistoryRead:
    entry = await directory.create_call_history(payload)
    return CallHistoryRead.model_validate(entry)


@call_history_router.get("/{call_id}", response_model=CallHistoryRead)
async def get_call_history(
    call_id: int, request: Request, directory: CallDirectory = CallDirectoryDep
) -> CallHistoryRead:
    entry = await directory.get_call_history_by_call(call_id)
    if entry is None:
        context = create_context_from_request(request)
        context.call_id = call_id
        raise ResourceNotFoundError(
            f"call history for call {call_id} not found",
            context=context,
            resource_type="call_history",
            resource_id=call_id,
            user_friendly=ErrorMessages.CALL_HISTORY_NOT_FOUND,
        )
    return CallHistoryRead.model_validate(entry)
