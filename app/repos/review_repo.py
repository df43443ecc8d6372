from __future__ import annotations

import time
from dataclasses import asdict, replace
from typing import Any, Protocol

from app.models.review import Review
from app.repos.document_store import DocumentStore

COLLECTION = "reviews"


class ReviewRepo(Protocol):
    async def fetch_for_teacher(self, teacher_id: str) -> list[Review]: ...
    async def fetch_for_student(self, student_id: str) -> list[Review]: ...
    async def find(self, review_id: str) -> Review | None: ...
    async def create(self, review: Review) -> Review: ...
    async def update(
        self, review_id: str, *, rating: int | None, review_text: str | None
    ) -> Review | None: ...
    async def delete(self, review_id: str) -> bool: ...


class DocumentReviewRepo:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def fetch_for_teacher(self, teacher_id: str) -> list[Review]:
        docs = await self._store.find(COLLECTION, {"teacher_id": teacher_id})
        return [_review_from_doc(d) for d in docs]

    async def fetch_for_student(self, student_id: str) -> list[Review]:
        docs = await self._store.find(COLLECTION, {"student_id": student_id})
        return [_review_from_doc(d) for d in docs]

    async def find(self, review_id: str) -> Review | None:
        doc = await self._store.get(COLLECTION, review_id)
        return _review_from_doc(doc) if doc is not None else None

    async def create(self, review: Review) -> Review:
        await self._store.insert(COLLECTION, review.id, asdict(review))
        return review

    async def update(
        self, review_id: str, *, rating: int | None, review_text: str | None
    ) -> Review | None:
        current = await self.find(review_id)
        if current is None:
            return None
        updated = replace(
            current,
            rating=rating if rating is not None else current.rating,
            review_text=review_text if review_text is not None else current.review_text,
            updated_at=int(time.time()),
        )
        if not await self._store.replace(COLLECTION, review_id, asdict(updated)):
            return None
        return updated

    async def delete(self, review_id: str) -> bool:
        return await self._store.delete(COLLECTION, review_id)


def _review_from_doc(doc: dict[str, Any]) -> Review:
    return Review(
        id=doc["id"],
        teacher_id=doc["teacher_id"],
        student_id=doc["student_id"],
        course_id=str(doc["course_id"]),
        rating=int(doc["rating"]),
        review_text=doc.get("review_text", ""),
        status=doc.get("status", "active"),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )
