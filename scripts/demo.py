#!/usr/bin/env python3
"""
Demo script for the ETag response cache.

Walks through a miss, a hit and an invalidation against the in-memory
backend, so no Redis server is needed.
"""

import asyncio

from etag_cache import CacheEntry, ResponseCache, generate_etag


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_miss_then_hit(cache: ResponseCache) -> str:
    """Store a response and read it back with its tag."""
    print_section("Miss, Store, Hit")

    body = '{"id":1,"name":"Foo","price":100.0}'
    etag = generate_etag(body)

    print("\n🔍 Lookup with an unknown tag:")
    entry = await cache.lookup("product-1", '"0-unknown"')
    print(f"  {'✗ MISS' if entry is None else '✓ HIT'}")

    print("\n📝 Storing the downstream response...")
    entry = CacheEntry.snapshot(
        200,
        [("content-type", "application/json"), ("etag", etag)],
        body,
    )
    key = await cache.save("product-1", entry)
    print(f"  ✓ Stored under: {key}")

    print("\n🔍 Lookup with the returned tag:")
    cached = await cache.lookup("product-1", etag)
    print(f"  ✓ HIT  status={cached.status_code}  body={cached.body}")
    return etag


async def demo_invalidation(cache: ResponseCache) -> None:
    """Clear a resource's entries by pattern."""
    print_section("Invalidation")

    for page in range(1, 4):
        body = f'[{{"page":{page}}}]'
        await cache.save(f'/products{{"page":"{page}"}}', CacheEntry(status_code=200, body=body))

    patterns = cache.key_patterns(["product-1*", "/products*"])
    keys = await cache.resolve_keys(patterns)
    print(f"\n📦 Keys matching {patterns}:")
    for key in keys:
        print(f"  - {key}")

    deleted = await cache.invalidate(patterns)
    print(f"\n🗑️  Deleted {deleted} entries")
    print(f"  Remaining: {len(cache.backend)}")


async def main() -> None:
    print("\n" + "=" * 70)
    print("  ETAG CACHE DEMO")
    print("=" * 70)

    cache = ResponseCache.create("memory", ttl=60)
    etag = await demo_miss_then_hit(cache)
    await demo_invalidation(cache)

    print_section("After Invalidation")
    entry = await cache.lookup("product-1", etag)
    print(f"\n  {'✗ MISS' if entry is None else '✓ HIT'} for {etag}")
    print("\n✓ Demo complete")


if __name__ == "__main__":
    asyncio.run(main())
