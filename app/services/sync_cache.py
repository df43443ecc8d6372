"""Role-partitioned TTL cache for cross-actor state (messages, progress).

One owner (a signed-in user) can act as a student or as a teacher, and
the two views of the same conversation differ.  The cache therefore keeps
one partition per (owner, role) and remembers which role is active:

    sync:<owner>:active          the role of the last put
    sync:<owner>:<role>          {"stored_at": <epoch>, "entries": [...]}

Rules:

  - ``get(role)`` is a MISS if that partition is absent, older than the
    TTL, or not the active role.  A teacher-scoped read is never served
    student-scoped entries, and vice versa.
  - ``put(role, ...)`` under a role other than the active one first drops
    the other partition.  Switching account type always forces a miss.
  - ``invalidate()`` drops every partition of the owner.  Every mutation
    (send message, mark read, update progress) calls it before returning,
    for every owner whose view the mutation touches.
  - ``read_through(role, fetch)`` fetches on a miss and stores the result.
    If that fetch fails it serves the last-known entries even when
    expired; with nothing last-known it returns an empty list and logs a
    warning.

Instances are cheap and bound to one owner.  All state lives in the
CacheService backend, so nothing here is module-level.
"""

from __future__ import annotations

import enum
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Literal

from app.core.metrics import SYNC_CACHE_OPERATIONS, UPSTREAM_FAILURES
from app.services.cache import CacheService

logger = logging.getLogger(__name__)

CacheRole = Literal["student", "teacher"]
Entry = dict[str, Any]
Clock = Callable[[], float]

DEFAULT_TTL_SECONDS = 30.0
# How long partitions survive in the backend for stale fallback.
_RETENTION_FACTOR = 20


class _Miss(enum.Enum):
    MISS = "MISS"


MISS = _Miss.MISS


class SyncCache:
    def __init__(
        self,
        backend: CacheService,
        owner: str,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        self._backend = backend
        self._owner = owner
        self._ttl = ttl_seconds
        self._clock = clock

    def _key(self, suffix: str) -> str:
        return f"sync:{self._owner}:{suffix}"

    @property
    def _retention(self) -> int:
        return max(1, int(self._ttl * _RETENTION_FACTOR))

    async def _load(self, role: CacheRole) -> tuple[float, list[Entry]] | None:
        raw = await self._backend.get(self._key(role))
        if raw is None:
            return None
        payload = json.loads(raw)
        return float(payload["stored_at"]), list(payload["entries"])

    async def get(self, role: CacheRole) -> list[Entry] | _Miss:
        active = await self._backend.get(self._key("active"))
        if active != role:
            SYNC_CACHE_OPERATIONS.labels(operation="miss").inc()
            return MISS
        loaded = await self._load(role)
        if loaded is None or self._clock() - loaded[0] >= self._ttl:
            SYNC_CACHE_OPERATIONS.labels(operation="miss").inc()
            return MISS
        SYNC_CACHE_OPERATIONS.labels(operation="hit").inc()
        return loaded[1]

    async def put(self, role: CacheRole, entries: list[Entry]) -> None:
        active = await self._backend.get(self._key("active"))
        if active is not None and active != role:
            logger.debug("sync cache: owner %s switched role %s -> %s", self._owner, active, role)
            await self._backend.delete(self._key(active))
        payload = json.dumps({"stored_at": self._clock(), "entries": entries})
        await self._backend.set(self._key(role), payload, self._retention)
        await self._backend.set(self._key("active"), role, self._retention)

    async def invalidate(self) -> None:
        SYNC_CACHE_OPERATIONS.labels(operation="invalidate").inc()
        await self._backend.delete_pattern(self._key("*"))

    async def read_through(
        self, role: CacheRole, fetch: Callable[[], Awaitable[list[Entry]]]
    ) -> list[Entry]:
        cached = await self.get(role)
        if cached is not MISS:
            return cached
        try:
            fresh = await fetch()
        except Exception as exc:
            UPSTREAM_FAILURES.labels(source="sync_refetch").inc()
            loaded = await self._load(role)
            if loaded is not None:
                SYNC_CACHE_OPERATIONS.labels(operation="stale").inc()
                logger.warning(
                    "sync cache: refetch failed for %s/%s, serving stale entries: %r",
                    self._owner,
                    role,
                    exc,
                )
                return loaded[1]
            logger.warning(
                "sync cache: refetch failed for %s/%s and nothing cached: %r",
                self._owner,
                role,
                exc,
            )
            return []
        await self.put(role, fresh)
        return fresh


class SyncCacheFactory:
    """Builds owner-bound SyncCache instances over one shared backend."""

    def __init__(
        self,
        backend: CacheService,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        self._backend = backend
        self._ttl = ttl_seconds
        self._clock = clock

    def for_owner(self, owner: str) -> SyncCache:
        return SyncCache(self._backend, owner, ttl_seconds=self._ttl, clock=self._clock)

    async def invalidate(self, *owners: str | None) -> None:
        """Invalidate every partition of every listed owner."""
        for owner in dict.fromkeys(o for o in owners if o):
            await self.for_owner(owner).invalidate()
