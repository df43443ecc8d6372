from __future__ import annotations

from dataclasses import asdict
from typing import Protocol

from app.models.message import Message
from app.repos.document_store import DocumentStore

COLLECTION = "messages"


class MessageRepo(Protocol):
    async def add(self, message: Message) -> None: ...
    async def get(self, message_id: str) -> Message | None: ...
    async def list_for_recipient(self, recipient_id: str) -> list[Message]: ...
    async def list_for_sender(self, sender_id: str) -> list[Message]: ...
    async def mark_read(self, message_id: str) -> bool: ...


class DocumentMessageRepo:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def add(self, message: Message) -> None:
        await self._store.insert(COLLECTION, message.id, asdict(message))

    async def get(self, message_id: str) -> Message | None:
        doc = await self._store.get(COLLECTION, message_id)
        return Message(**doc) if doc is not None else None

    async def list_for_recipient(self, recipient_id: str) -> list[Message]:
        docs = await self._store.find(COLLECTION, {"recipient_id": recipient_id})
        return [Message(**d) for d in docs]

    async def list_for_sender(self, sender_id: str) -> list[Message]:
        docs = await self._store.find(COLLECTION, {"sender_id": sender_id})
        return [Message(**d) for d in docs]

    async def mark_read(self, message_id: str) -> bool:
        doc = await self._store.get(COLLECTION, message_id)
        if doc is None:
            return False
        doc["is_read"] = True
        return await self._store.replace(COLLECTION, message_id, doc)
