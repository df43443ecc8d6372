from __future__ import annotations

from dataclasses import asdict
from typing import Protocol

from app.models.moderation import ModerationDecision
from app.repos.document_store import DocumentStore

COLLECTION = "moderation_decisions"


class DecisionRepo(Protocol):
    async def append(self, decision: ModerationDecision) -> None: ...
    async def list_for_course(self, course_id: str) -> list[ModerationDecision]: ...


class DocumentDecisionRepo:
    """Append-only: no update or delete."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def append(self, decision: ModerationDecision) -> None:
        await self._store.insert(COLLECTION, decision.id, asdict(decision))

    async def list_for_course(self, course_id: str) -> list[ModerationDecision]:
        docs = await self._store.find(COLLECTION, {"course_id": course_id})
        return [ModerationDecision(**d) for d in docs]
