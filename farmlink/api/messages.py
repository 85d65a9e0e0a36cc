"""Chat transcript endpoint. Messages are only ever written by the signaling relay."""

from fastapi import APIRouter

from ..dependencies import CallDirectoryDep
from ..directory import CallDirectory
from ..models import User
from ..schemas import MessageWithSender, UserSummary

message_router = APIRouter(prefix="/api/messages", tags=["messages"])


@message_router.get("/{call_id}", response_model=list[MessageWithSender])
async def list_call_messages(call_id: int, directory: CallDirectory = CallDirectoryDep) -> list[MessageWithSender]:
    messages = await directory.get_messages_by_call(call_id)

    senders: dict[int, User | None] = {}
    for message in messages:
        if message.sender_id not in senders:
            senders[message.sender_id] = await directory.get_user(message.sender_id)

    result = []
    for message in messages:
        sender = senders[message.sender_id]
        result.append(
            MessageWithSender.model_validate(message).model_copy(
                update={"sender": UserSummary.model_validate(sender) if sender is not None else None}
            )
        )
    return result
