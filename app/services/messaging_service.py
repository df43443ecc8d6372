"""Course messaging between students and the course instructor.

Students write to the instructor of record of a course; instructors write
to students enrolled in it.  Reads go through the owner's SyncCache under
the role the caller is acting as.  Every mutation (send, mark read)
invalidates the caches of both parties before returning, so neither side
is served a list the mutation has already made stale.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, replace
from typing import Any

from app.core.errors import Forbidden, NotFound, ValidationFailed
from app.models.message import ActorRole, Message, MessageType
from app.models.principal import Principal
from app.repos.enrollment_repo import EnrollmentRepo
from app.repos.message_repo import MessageRepo
from app.services.catalog_service import CatalogService
from app.services.identifiers import classify, storage_key
from app.services.sync_cache import SyncCacheFactory

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


class MessagingService:
    def __init__(
        self,
        *,
        catalog: CatalogService,
        messages: MessageRepo,
        enrollments: EnrollmentRepo,
        sync_caches: SyncCacheFactory,
    ) -> None:
        self._catalog = catalog
        self._messages = messages
        self._enrollments = enrollments
        self._caches = sync_caches

    async def send(
        self,
        principal: Principal,
        *,
        as_role: ActorRole,
        course_id: object,
        body: str,
        recipient_id: str | None = None,
        message_type: MessageType = "info",
        reply_to: str | None = None,
    ) -> Message:
        text = (body or "").strip()
        if not text:
            raise ValidationFailed("Message body is required", fields=["body"])
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationFailed(
                f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters", fields=["body"]
            )
        if not principal.has_role(as_role):
            raise Forbidden(f"You are not signed in as a {as_role}")

        course = await self._catalog.find_course(course_id)
        key = storage_key(classify(course.id))
        instructor = await self._catalog.get_instructor(course.id)

        if as_role == "student":
            if instructor is None:
                raise ValidationFailed("This course has no instructor to message")
            if await self._enrollments.get(key, principal.user_id) is None:
                raise Forbidden("Not enrolled in this course")
            recipient = instructor.teacher_id
        else:
            if instructor is None or instructor.teacher_id != principal.user_id:
                raise Forbidden("You do not teach this course")
            if not recipient_id:
                raise ValidationFailed("recipient_id is required", fields=["recipient_id"])
            if await self._enrollments.get(key, recipient_id) is None:
                raise ValidationFailed(
                    "Recipient is not enrolled in this course", fields=["recipient_id"]
                )
            recipient = recipient_id

        message = Message.new(
            course_id=key,
            sender_id=principal.user_id,
            sender_role=as_role,
            recipient_id=recipient,
            body=text,
            message_type=message_type,
            sender_name=principal.display_name,
            reply_to=reply_to,
        )
        await self._messages.add(message)
        await self._caches.invalidate(principal.user_id, recipient)
        logger.info(
            "Message %s sent by %s to %s",
            message.id,
            principal.user_id,
            recipient,
            extra={"course_id": key, "actor_id": principal.user_id},
        )
        return message

    async def list_messages(
        self, principal: Principal, as_role: ActorRole
    ) -> list[dict[str, Any]]:
        if not principal.has_role(as_role):
            raise Forbidden(f"You are not signed in as a {as_role}")
        user_id = principal.user_id

        async def _fetch() -> list[dict[str, Any]]:
            inbox = await self._messages.list_for_recipient(user_id)
            outbox = await self._messages.list_for_sender(user_id)
            mine = [m for m in inbox if m.recipient_role == as_role]
            mine += [m for m in outbox if m.sender_role == as_role]
            mine.sort(key=lambda m: m.created_at)
            return [asdict(m) for m in mine]

        return await self._caches.for_owner(user_id).read_through(as_role, _fetch)

    async def mark_read(self, principal: Principal, message_id: str) -> Message:
        message = await self._messages.get(message_id)
        if message is None or message.recipient_id != principal.user_id:
            raise NotFound("Message not found")
        if not await self._messages.mark_read(message_id):
            raise NotFound("Message not found")
        await self._caches.invalidate(message.recipient_id, message.sender_id)
        return replace(message, is_read=True)
