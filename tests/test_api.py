"""
Tests for the example product API.
"""

import pytest
from fastapi.testclient import TestClient

from etag_cache import MemoryBackend, ResponseCache
from etag_cache.api.app import create_app


@pytest.fixture
def backend():
    """Create the in-memory store shared by the app and the assertions."""
    return MemoryBackend()


@pytest.fixture
def client(backend):
    """Create a test client with an injected memory-backed cache."""
    app = create_app(ResponseCache(backend, key_prefix="express-cache:", ttl=60))
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "ETag Cache Example API"
    assert "products" in data["endpoints"]


def test_list_products_is_cached(client, backend):
    """Second request with the returned tag is served from the cache."""
    first = client.get("/products")
    assert first.status_code == 200
    assert [p["name"] for p in first.json()] == ["Foo", "Bar"]
    etag = first.headers["etag"]

    assert len(backend) == 1
    second = client.get("/products", headers={"If-None-Match": etag})
    assert second.status_code == 200
    assert second.json() == first.json()
    assert second.headers["etag"] == etag


def test_get_product_uses_resource_tag_prefix(client, backend):
    response = client.get("/products/1")
    assert response.status_code == 200
    assert response.json() == {"id": 1, "name": "Foo", "price": 100.0}

    keys = stored_keys(backend, "express-cache:product-1*")
    assert keys == ["express-cache:product-1" + response.headers["etag"]]


def test_missing_product_not_cached(client, backend):
    response = client.get("/products/99")
    assert response.status_code == 404
    assert "etag" not in response.headers
    assert len(backend) == 0


def test_update_product_clears_related_entries(client, backend):
    """PUT invalidates the product entry and every list entry."""
    product = client.get("/products/1")
    client.get("/products")
    client.get("/products/2")
    assert len(backend) == 3

    response = client.put("/products/1", json={"name": "Foo v2", "price": 120.0})
    assert response.status_code == 200
    assert response.json()["name"] == "Foo v2"

    # only /products/2 survives
    assert len(backend) == 1

    refreshed = client.get("/products/1", headers={"If-None-Match": product.headers["etag"]})
    assert refreshed.json()["name"] == "Foo v2"
    assert refreshed.headers["etag"] != product.headers["etag"]


def test_invalid_update_does_not_clear(client, backend):
    client.get("/products/1")

    response = client.put("/products/1", json={"name": "", "price": -1})

    assert response.status_code == 422
    assert len(backend) == 1


def test_get_cache_config(client):
    response = client.get("/cache/config")
    assert response.status_code == 200
    data = response.json()
    assert data["key_prefix"] == "express-cache:"
    assert data["ttl_seconds"] == 60
    assert data["request_header_name"] == "if-none-match"
    assert data["response_header_name"] == "etag"
    assert data["backend"] == "MemoryBackend"


def test_invalidate_endpoint(client, backend):
    client.get("/products")
    client.get("/products/1")

    response = client.post("/cache/invalidate", json={"patterns": ["/products*"]})

    assert response.status_code == 200
    data = response.json()
    assert data["deleted_count"] == 1
    assert data["patterns"] == ["express-cache:/products*"]
    assert len(backend) == 1


def test_invalidate_requires_patterns(client):
    response = client.post("/cache/invalidate", json={"patterns": []})
    assert response.status_code == 422


def stored_keys(backend, pattern):
    """Synchronous view of the keys matching a pattern."""
    return [key for key in list(backend._store) if key.startswith(pattern.rstrip("*"))]
