"""
Tests for the CacheBackend implementations and backend selection.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from etag_cache import (
    AsyncRedisBackend,
    BackendError,
    BackendKind,
    CacheBackend,
    ConfigurationError,
    MemoryBackend,
    RedisBackend,
    ResponseCache,
    create_backend,
)


def make_async_client(keys_by_pattern=None):
    client = AsyncMock()
    keys_by_pattern = keys_by_pattern or {}

    async def scan_iter(match=None):
        for key in keys_by_pattern.get(match, []):
            yield key

    client.scan_iter = scan_iter
    return client


# Factory


@pytest.mark.parametrize(
    "kind,client,expected",
    [
        ("redis", MagicMock(), RedisBackend),
        (BackendKind.REDIS, MagicMock(), RedisBackend),
        ("redis-asyncio", AsyncMock(), AsyncRedisBackend),
        ("memory", None, MemoryBackend),
    ],
)
def test_create_backend_selects_adapter(kind, client, expected):
    backend = create_backend(kind, client)
    assert isinstance(backend, expected)
    assert isinstance(backend, CacheBackend)


@pytest.mark.parametrize("kind", ["", None])
def test_create_backend_requires_kind(kind):
    with pytest.raises(ConfigurationError):
        create_backend(kind, MagicMock())


def test_create_backend_rejects_unknown_kind():
    with pytest.raises(ConfigurationError) as exc_info:
        create_backend("memcached", MagicMock())
    assert exc_info.value.details == {"kind": "memcached"}


@pytest.mark.parametrize("kind", ["redis", "redis-asyncio"])
def test_create_backend_requires_redis_client(kind):
    with pytest.raises(ConfigurationError):
        create_backend(kind, None)


def test_create_backend_memory_uses_given_store():
    store = {}
    backend = create_backend("memory", store)
    assert backend._store is store


# redis.Redis (sync) adapter


@pytest.mark.asyncio
async def test_redis_backend_get_decodes_bytes():
    client = MagicMock()
    client.get.return_value = b'{"status_code":200}'
    backend = RedisBackend(client)

    assert await backend.get("k") == '{"status_code":200}'
    client.get.assert_called_once_with("k")


@pytest.mark.asyncio
async def test_redis_backend_get_absent():
    client = MagicMock()
    client.get.return_value = None
    assert await RedisBackend(client).get("k") is None


@pytest.mark.asyncio
async def test_redis_backend_set_with_expiry():
    client = MagicMock()
    await RedisBackend(client).set_with_expiry("k", "v", 60)
    client.set.assert_called_once_with("k", "v", ex=60)


@pytest.mark.asyncio
async def test_redis_backend_delete_is_variadic():
    client = MagicMock()
    client.delete.return_value = 2
    backend = RedisBackend(client)

    assert await backend.delete(["a1", "b1"]) == 2
    client.delete.assert_called_once_with("a1", "b1")


@pytest.mark.asyncio
async def test_redis_backend_delete_empty_skips_client():
    client = MagicMock()
    assert await RedisBackend(client).delete([]) == 0
    client.delete.assert_not_called()


@pytest.mark.asyncio
async def test_redis_backend_find_by_pattern():
    client = MagicMock()
    client.scan_iter.return_value = iter([b"express-cache:a1", b"express-cache:a2"])

    keys = await RedisBackend(client).find_by_pattern("express-cache:a*")

    assert keys == ["express-cache:a1", "express-cache:a2"]
    client.scan_iter.assert_called_once_with(match="express-cache:a*")


@pytest.mark.asyncio
async def test_redis_backend_wraps_errors():
    client = MagicMock()
    error = RedisConnectionError("connection refused")
    client.get.side_effect = error

    with pytest.raises(BackendError) as exc_info:
        await RedisBackend(client).get("k")

    assert exc_info.value.operation == "get"
    assert exc_info.value.key == "k"
    assert exc_info.value.__cause__ is error
    assert exc_info.value.details["original_error_type"] == "ConnectionError"


# redis.asyncio adapter


@pytest.mark.asyncio
async def test_async_redis_backend_operations():
    client = make_async_client({"p*": [b"p1", "p2"]})
    client.get.return_value = b"value"
    client.delete.return_value = 1
    backend = AsyncRedisBackend(client)

    assert await backend.get("k") == "value"
    await backend.set_with_expiry("k", "v", 30)
    assert await backend.delete(["k"]) == 1
    assert await backend.find_by_pattern("p*") == ["p1", "p2"]

    client.set.assert_awaited_once_with("k", "v", ex=30)
    client.delete.assert_awaited_once_with("k")


@pytest.mark.asyncio
async def test_async_redis_backend_wraps_errors():
    client = make_async_client()
    client.set.side_effect = RedisConnectionError("down")

    with pytest.raises(BackendError) as exc_info:
        await AsyncRedisBackend(client).set_with_expiry("k", "v", 30)

    assert exc_info.value.operation == "set"
    assert "down" in exc_info.value.message


@pytest.mark.asyncio
async def test_async_redis_backend_close():
    client = make_async_client()
    await AsyncRedisBackend(client).close()
    client.aclose.assert_awaited_once()


# Memory adapter


@pytest.mark.asyncio
async def test_memory_backend_set_get(memory_backend):
    await memory_backend.set_with_expiry("k", "v", 60)
    assert await memory_backend.get("k") == "v"
    assert await memory_backend.get("missing") is None


@pytest.mark.asyncio
async def test_memory_backend_expiry(memory_backend, clock):
    await memory_backend.set_with_expiry("k", "v", 60)

    clock.advance(59)
    assert await memory_backend.get("k") == "v"

    clock.advance(1)
    assert await memory_backend.get("k") is None
    assert len(memory_backend) == 0


@pytest.mark.asyncio
async def test_memory_backend_find_and_delete(memory_backend, clock):
    await memory_backend.set_with_expiry("express-cache:a1", "1", 60)
    await memory_backend.set_with_expiry("express-cache:a2", "2", 10)
    await memory_backend.set_with_expiry("express-cache:b1", "3", 60)

    assert sorted(await memory_backend.find_by_pattern("express-cache:a*")) == [
        "express-cache:a1",
        "express-cache:a2",
    ]

    clock.advance(10)
    assert await memory_backend.find_by_pattern("express-cache:a*") == ["express-cache:a1"]

    assert await memory_backend.delete(["express-cache:a1", "express-cache:a1", "express-cache:zz"]) == 1
    assert len(memory_backend) == 1


@pytest.mark.asyncio
async def test_memory_backend_pattern_is_case_sensitive(memory_backend):
    await memory_backend.set_with_expiry("Key", "v", 60)
    assert await memory_backend.find_by_pattern("key*") == []


@pytest.mark.asyncio
async def test_redis_backend_wraps_undecodable_value():
    client = MagicMock()
    client.get.return_value = b"\xff\xfe"

    with pytest.raises(BackendError) as exc_info:
        await RedisBackend(client).get("k")

    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_async_redis_backend_wraps_undecodable_key():
    client = make_async_client({"p*": [b"p1", b"\xff"]})

    with pytest.raises(BackendError) as exc_info:
        await AsyncRedisBackend(client).find_by_pattern("p*")

    assert exc_info.value.operation == "find_by_pattern"
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


# ResponseCache.create


def test_response_cache_create_memory():
    cache = ResponseCache.create("memory", ttl=5, key_prefix="test:")
    assert isinstance(cache.backend, MemoryBackend)
    assert cache.ttl == 5
    assert cache.key_prefix == "test:"


def test_response_cache_create_redis_asyncio():
    client = make_async_client()
    cache = ResponseCache.create(BackendKind.REDIS_ASYNCIO, client)
    assert isinstance(cache.backend, AsyncRedisBackend)
    assert cache.backend.client is client


def test_response_cache_create_requires_client():
    with pytest.raises(ConfigurationError):
        ResponseCache.create("redis")
