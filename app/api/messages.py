"""Course messages between enrolled students and the course instructor.

``GET /v1/messages`` is served through the caller's sync cache.  A user
holding both the student and the teacher role picks which side they are
reading with ``?role=``; switching side drops the other side's cached
list.
"""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.dependencies import require_user
from app.models.message import Message
from app.models.principal import Principal
from app.services.messaging_service import MAX_MESSAGE_LENGTH
from app.services.registry import messaging_service

router = APIRouter(prefix="/v1/messages", tags=["messages"])

ActorRoleParam = Literal["student", "teacher"]


class MessageIn(BaseModel):
    as_role: ActorRoleParam
    course_id: str
    body: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    recipient_id: str | None = None
    message_type: Literal["info", "reminder", "zoom", "question"] = "info"
    reply_to: str | None = None


class MessageOut(BaseModel):
    id: str
    course_id: str
    sender_id: str
    sender_role: str
    sender_name: str | None = None
    recipient_id: str
    recipient_role: str
    body: str
    message_type: str
    reply_to: str | None = None
    is_read: bool
    created_at: int


def _message_out(message: Message) -> MessageOut:
    return MessageOut(
        id=message.id,
        course_id=message.course_id,
        sender_id=message.sender_id,
        sender_role=message.sender_role,
        sender_name=message.sender_name,
        recipient_id=message.recipient_id,
        recipient_role=message.recipient_role,
        body=message.body,
        message_type=message.message_type,
        reply_to=message.reply_to,
        is_read=message.is_read,
        created_at=message.created_at,
    )


@router.get("", response_model=list[MessageOut])
async def list_messages(
    principal: Annotated[Principal, Depends(require_user)],
    role: ActorRoleParam = "student",
) -> list[MessageOut]:
    entries = await messaging_service.list_messages(principal, role)
    return [MessageOut(**e) for e in entries]


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    body: MessageIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> MessageOut:
    message = await messaging_service.send(
        principal,
        as_role=body.as_role,
        course_id=body.course_id,
        body=body.body,
        recipient_id=body.recipient_id,
        message_type=body.message_type,
        reply_to=body.reply_to,
    )
    return _message_out(message)


@router.post("/{message_id}/read", response_model=MessageOut)
async def mark_read(
    message_id: str,
    principal: Annotated[Principal, Depends(require_user)],
) -> MessageOut:
    return _message_out(await messaging_service.mark_read(principal, message_id))
