"""
Tests for the Redis cache helpers, using a mocked async Redis client.
"""

import json
import pytest
import redis.asyncio as redis
from decimal import Decimal
from unittest.mock import AsyncMock

from api.cache_redis import (
    CacheTTL,
    cache_get_company,
    cache_get_job,
    cache_invalidate_company,
    cache_invalidate_job,
    cache_set_company,
    cache_set_job,
)


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    return client


class TestCompanyCache:
    """Test company cache helpers."""

    async def test_set_uses_handle_key_and_ttl(self, redis_client):
        await cache_set_company(redis_client, {"handle": "c1", "name": "C1", "jobs": []})

        key, ttl, raw = redis_client.setex.await_args.args
        assert key == "company:c1"
        assert ttl == CacheTTL.COMPANY.value
        assert json.loads(raw)["name"] == "C1"

    async def test_decimal_stored_as_string(self, redis_client):
        company = {"handle": "c1", "jobs": [{"id": 1, "equity": Decimal("0.5")}]}
        await cache_set_company(redis_client, company)

        raw = redis_client.setex.await_args.args[2]
        assert json.loads(raw)["jobs"][0]["equity"] == "0.5"

    async def test_get_hit(self, redis_client):
        redis_client.get.return_value = json.dumps({"handle": "c1"})
        assert await cache_get_company(redis_client, "c1") == {"handle": "c1"}
        redis_client.get.assert_awaited_with("company:c1")

    async def test_get_miss(self, redis_client):
        assert await cache_get_company(redis_client, "c1") is None

    async def test_get_failure_is_miss(self, redis_client):
        redis_client.get.side_effect = redis.ConnectionError("down")
        assert await cache_get_company(redis_client, "c1") is None

    async def test_unreadable_entry_is_miss(self, redis_client):
        redis_client.get.return_value = "{not json"
        assert await cache_get_company(redis_client, "c1") is None

    async def test_set_failure_swallowed(self, redis_client):
        redis_client.setex.side_effect = redis.ConnectionError("down")
        await cache_set_company(redis_client, {"handle": "c1"})

    async def test_invalidate(self, redis_client):
        await cache_invalidate_company(redis_client, "c1")
        redis_client.delete.assert_awaited_with("company:c1")


class TestJobCache:
    """Test job cache helpers."""

    async def test_set_and_get(self, redis_client):
        await cache_set_job(redis_client, {"title": "j1", "salary": 1})
        key, ttl, raw = redis_client.setex.await_args.args
        assert key == "job:j1"
        assert ttl == CacheTTL.JOB.value

        redis_client.get.return_value = raw
        assert await cache_get_job(redis_client, "j1") == {"title": "j1", "salary": 1}

    async def test_invalidate_failure_swallowed(self, redis_client):
        redis_client.delete.side_effect = redis.ConnectionError("down")
        await cache_invalidate_job(redis_client, "j1")
