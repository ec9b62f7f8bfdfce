"""
Tests for key, tag prefix and fingerprint derivation.
"""

import pytest
from starlette.requests import Request

from etag_cache.keys import (
    build_key,
    default_tag_prefix,
    generate_etag,
    is_success_status,
    resolve_tag_patterns,
    resolve_tag_prefix,
    serialize_query,
)


def make_request(path: str = "/products", query: str = "") -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": query.encode(),
        "headers": [],
        "path_params": {"product_id": 7},
    }
    return Request(scope)


def test_generate_etag_empty_body():
    """Empty body fingerprint matches the well-known value."""
    assert generate_etag("") == '"0-2jmj7l5rSw0yVb/vlWAYkK/YBwk"'


def test_generate_etag_length_is_hex_byte_count():
    body = "é" * 10  # 20 bytes in UTF-8
    tag = generate_etag(body)
    assert tag.startswith('"14-')
    assert tag.endswith('"')
    assert len(tag.strip('"').split("-", 1)[1]) == 27


def test_generate_etag_is_deterministic():
    assert generate_etag('{"name":"Foo"}') == generate_etag(b'{"name":"Foo"}')
    assert generate_etag("a") != generate_etag("b")


@pytest.mark.parametrize(
    "status_code,expected",
    [(199, False), (200, True), (204, True), (299, True), (300, False), (400, False), (500, False)],
)
def test_is_success_status(status_code, expected):
    assert is_success_status(status_code) is expected


def test_serialize_query_empty():
    assert serialize_query(make_request()) == ""


def test_serialize_query_sorted_and_repeated():
    request = make_request(query="page=2&tag=a&sort=name&tag=b")
    assert serialize_query(request) == '{"page":"2","sort":"name","tag":["a","b"]}'


def test_default_tag_prefix_combines_path_and_query():
    assert default_tag_prefix(make_request(query="page=1")) == '/products{"page":"1"}'
    assert default_tag_prefix(make_request()) == "/products"


@pytest.mark.asyncio
async def test_resolve_tag_prefix_precedence():
    request = make_request(query="page=1")

    assert await resolve_tag_prefix(request, "static-") == "static-"
    assert await resolve_tag_prefix(request, lambda r: f"product-{r.path_params['product_id']}") == "product-7"
    assert await resolve_tag_prefix(request, "") == '/products{"page":"1"}'
    assert await resolve_tag_prefix(request, None) == '/products{"page":"1"}'


@pytest.mark.asyncio
async def test_resolve_tag_prefix_async_callable():
    async def prefix(request):
        return "async-"

    assert await resolve_tag_prefix(make_request(), prefix) == "async-"


@pytest.mark.asyncio
async def test_resolve_tag_patterns():
    request = make_request()

    assert await resolve_tag_patterns(request, None) == []
    assert await resolve_tag_patterns(request, "") == []
    assert await resolve_tag_patterns(request, "/products*") == ["/products*"]
    assert await resolve_tag_patterns(request, ["a*", "", "b*"]) == ["a*", "b*"]
    assert await resolve_tag_patterns(request, lambda r: [f"product-{r.path_params['product_id']}*"]) == [
        "product-7*"
    ]


def test_build_key():
    assert build_key("express-cache:", "product-", "abcd-1234") == "express-cache:product-abcd-1234"
