"""Generic document store: the CRUD/query API every repo sits on.

Documents are plain JSON-compatible dicts grouped into named collections
and addressed by a string ``doc_id``.  ``find`` and ``delete_many`` take
an equality filter on top-level keys (``{"teacher_id": "t-1"}``); that is
all any repo needs, and it maps directly onto JSONB containment (``@>``)
in the Postgres implementation.

Results come back in insertion order, so "submission order" is
well-defined for the merger.

Failures: implementations raise UpstreamUnavailable when the backing
store cannot be reached.  Callers on the read path absorb it; callers on
the write path let it propagate.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Protocol

Document = dict[str, Any]


class DocumentStore(Protocol):
    async def insert(self, collection: str, doc_id: str, doc: Document) -> None:
        """Store a new document.  Raises KeyError if ``doc_id`` is taken."""
        ...

    async def get(self, collection: str, doc_id: str) -> Document | None: ...

    async def find(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[Document]: ...

    async def replace(self, collection: str, doc_id: str, doc: Document) -> bool:
        """Overwrite an existing document.  Returns False if it was absent."""
        ...

    async def upsert(self, collection: str, doc_id: str, doc: Document) -> None: ...

    async def delete(self, collection: str, doc_id: str) -> bool: ...

    async def delete_many(self, collection: str, where: Mapping[str, Any]) -> int: ...


def _matches(doc: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    if not where:
        return True
    return all(key in doc and doc[key] == value for key, value in where.items())


class InMemoryDocumentStore:
    """Dict-backed store for dev and tests.

    Documents are deep-copied on the way in and out so callers can never
    mutate stored state by accident.  The autouse fixture in conftest.py
    calls ``clear()`` between tests.
    """

    def __init__(self) -> None:
        # Python dicts keep insertion order, which gives ``find`` its order.
        self._collections: dict[str, dict[str, Document]] = {}

    def clear(self) -> None:
        self._collections.clear()

    def _bucket(self, collection: str) -> dict[str, Document]:
        return self._collections.setdefault(collection, {})

    async def insert(self, collection: str, doc_id: str, doc: Document) -> None:
        bucket = self._bucket(collection)
        if doc_id in bucket:
            raise KeyError(f"{collection}/{doc_id} already exists")
        bucket[doc_id] = copy.deepcopy(doc)

    async def get(self, collection: str, doc_id: str) -> Document | None:
        doc = self._bucket(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[Document]:
        return [
            copy.deepcopy(doc)
            for doc in self._bucket(collection).values()
            if _matches(doc, where)
        ]

    async def replace(self, collection: str, doc_id: str, doc: Document) -> bool:
        bucket = self._bucket(collection)
        if doc_id not in bucket:
            return False
        bucket[doc_id] = copy.deepcopy(doc)
        return True

    async def upsert(self, collection: str, doc_id: str, doc: Document) -> None:
        self._bucket(collection)[doc_id] = copy.deepcopy(doc)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._bucket(collection).pop(doc_id, None) is not None

    async def delete_many(self, collection: str, where: Mapping[str, Any]) -> int:
        bucket = self._bucket(collection)
        doomed = [doc_id for doc_id, doc in bucket.items() if _matches(doc, where)]
        for doc_id in doomed:
            del bucket[doc_id]
        return len(doomed)
