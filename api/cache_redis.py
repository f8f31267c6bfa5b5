"""
Redis caching layer for the Jobly API.

Implements cache-aside for single company and single job lookups. Entries
are JSON documents with per-entity TTLs; writes invalidate them. A cache
failure is logged and treated as a miss, never as a request error.
"""

import json
import redis.asyncio as redis
from enum import Enum
from typing import Any, Dict, Optional
from config.settings import REDIS_CONFIG
from logging_config.logger import get_logger

logger = get_logger(__name__)


class CacheTTL(int, Enum):
    """Cache TTL values in seconds for different entity types."""
    COMPANY = 600  # 10 minutes - embeds the job list, so kept short
    JOB = 900  # 15 minutes


class CacheKeyPrefix(str, Enum):
    """Redis key prefixes for namespacing and clarity."""
    COMPANY = "company"  # Format: company:{handle} -> company JSON
    JOB = "job"  # Format: job:{title} -> job JSON


# Module-level connection pool
_redis_pool: Optional[redis.ConnectionPool] = None


async def init_redis() -> redis.Redis:
    """
    Initialize Redis connection pool.

    Returns:
        redis.Redis: Redis client instance using the connection pool

    Raises:
        redis.ConnectionError: If Redis connection fails
    """
    global _redis_pool

    try:
        _redis_pool = redis.ConnectionPool(
            host=REDIS_CONFIG["host"],
            port=REDIS_CONFIG["port"],
            max_connections=REDIS_CONFIG["max_connections"],
            decode_responses=True,
            socket_connect_timeout=REDIS_CONFIG["socket_connect_timeout"],
            socket_keepalive=True,
        )

        logger.info("Redis connection pool initialized successfully")
        return redis.Redis(connection_pool=_redis_pool)

    except redis.ConnectionError as e:
        logger.error(f"Failed to initialize Redis pool: {e}")
        raise


async def close_redis(redis_client: redis.Redis) -> None:
    """
    Close Redis client and connection pool.

    Args:
        redis_client: The Redis client to close
    """
    try:
        if redis_client:
            await redis_client.aclose()

        if _redis_pool:
            await _redis_pool.aclose()

        logger.info("Redis connections closed")

    except redis.RedisError as e:
        logger.error(f"Error closing Redis connections: {e}")


def make_key(prefix: CacheKeyPrefix, identifier: str) -> str:
    """Generate the Redis key for an entity."""
    return f"{prefix.value}:{identifier}"


async def _cache_set(redis_client: redis.Redis, key: str, ttl: CacheTTL, payload: Dict[str, Any]) -> None:
    try:
        # Decimal equity values serialize as strings, as in API responses
        await redis_client.setex(key, ttl.value, json.dumps(payload, default=str))
        logger.debug(f"Cached {key}")

    except redis.RedisError as e:
        logger.error(f"Failed to cache {key}: {e}")


async def _cache_get(redis_client: redis.Redis, key: str) -> Optional[Dict[str, Any]]:
    try:
        raw = await redis_client.get(key)
    except redis.RedisError as e:
        logger.error(f"Failed to read cache for {key}: {e}")
        return None

    logger.debug(f"Cache {'hit' if raw else 'miss'}: {key}")
    if raw is None:
        return None

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Discarding unreadable cache entry: {key}")
        return None


async def _cache_delete(redis_client: redis.Redis, key: str) -> None:
    try:
        await redis_client.delete(key)
        logger.debug(f"Invalidated cache: {key}")

    except redis.RedisError as e:
        logger.error(f"Failed to invalidate cache for {key}: {e}")


# ---------- Company Cache ----------

async def cache_set_company(redis_client: redis.Redis, company: Dict[str, Any]) -> None:
    """Cache a company payload (including its jobs) under its handle."""
    key = make_key(CacheKeyPrefix.COMPANY, company["handle"])
    await _cache_set(redis_client, key, CacheTTL.COMPANY, company)


async def cache_get_company(redis_client: redis.Redis, handle: str) -> Optional[Dict[str, Any]]:
    """
    Get a cached company.

    Returns:
        dict if cached, None on a miss or cache failure
    """
    return await _cache_get(redis_client, make_key(CacheKeyPrefix.COMPANY, handle))


async def cache_invalidate_company(redis_client: redis.Redis, handle: str) -> None:
    """Drop a cached company, e.g. after it or one of its jobs changed."""
    await _cache_delete(redis_client, make_key(CacheKeyPrefix.COMPANY, handle))


# ---------- Job Cache ----------

async def cache_set_job(redis_client: redis.Redis, job: Dict[str, Any]) -> None:
    """Cache a job payload under its title."""
    key = make_key(CacheKeyPrefix.JOB, job["title"])
    await _cache_set(redis_client, key, CacheTTL.JOB, job)


async def cache_get_job(redis_client: redis.Redis, title: str) -> Optional[Dict[str, Any]]:
    """Get a cached job, or None on a miss or cache failure."""
    return await _cache_get(redis_client, make_key(CacheKeyPrefix.JOB, title))


async def cache_invalidate_job(redis_client: redis.Redis, title: str) -> None:
    """Drop a cached job."""
    await _cache_delete(redis_client, make_key(CacheKeyPrefix.JOB, title))
