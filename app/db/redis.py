"""Redis connection management.

Mirrors engine.py: when REDIS_URL is configured we create a shared
connection pool, when it is None every consumer falls back to an
in-memory implementation and no Redis server is needed.

Only the sync cache uses Redis.  Its entries are short-lived (30 s TTL)
and must be visible to every API instance, otherwise a message sent
through one instance would stay invisible to a reader routed to another
until the TTL lapsed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    if redis_pool is None:
        logger.info("No REDIS_URL configured, sync cache is in-memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected")
    except aioredis.RedisError:
        # Start anyway; sync cache reads fall back to the stores.
        logger.exception("Redis connection failed on startup")
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
