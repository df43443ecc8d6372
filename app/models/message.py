from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal

from app.services.identifiers import new_document_id

ActorRole = Literal["student", "teacher"]
MessageType = Literal["info", "reminder", "zoom", "question"]


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    course_id: str
    sender_id: str
    sender_role: ActorRole
    recipient_id: str
    recipient_role: ActorRole
    body: str
    message_type: MessageType = "info"
    sender_name: str | None = None
    reply_to: str | None = None
    is_read: bool = False
    created_at: int = 0

    @staticmethod
    def new(
        *,
        course_id: str,
        sender_id: str,
        sender_role: ActorRole,
        recipient_id: str,
        body: str,
        message_type: MessageType = "info",
        sender_name: str | None = None,
        reply_to: str | None = None,
    ) -> Message:
        recipient_role: ActorRole = "teacher" if sender_role == "student" else "student"
        return Message(
            id=new_document_id(),
            course_id=course_id,
            sender_id=sender_id,
            sender_role=sender_role,
            recipient_id=recipient_id,
            recipient_role=recipient_role,
            body=body,
            message_type=message_type,
            sender_name=sender_name,
            reply_to=reply_to,
            created_at=int(time.time()),
        )
