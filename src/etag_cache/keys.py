"""Cache key, tag prefix and fingerprint derivation.

Key layout::

    <key prefix><tag prefix><tag>
    express-cache:/products{"page":"1"}"1b-Zm9vYmFy..."

The tag prefix groups every cached version of one resource so that a
pattern such as ``express-cache:/products*`` can invalidate all of them.
"""

import base64
import hashlib
import inspect
import json
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.requests import Request

TagPrefix = str | Callable[[Request], str | Awaitable[str]]
TagPatternValue = str | list[str]
TagPattern = TagPatternValue | Callable[[Request], TagPatternValue | Awaitable[TagPatternValue]]
EligibilityPredicate = Callable[[int], bool]


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


def is_success_status(status_code: int) -> bool:
    """Default eligibility predicate: 2xx responses only."""
    return 200 <= status_code <= 299


def serialize_query(request: Request) -> str:
    """Canonical JSON of the query string, or "" when there is none.

    Keys are sorted; a parameter given more than once becomes a list.
    """
    params: dict[str, str | list[str]] = {}
    for name, value in request.query_params.multi_items():
        existing = params.get(name)
        if existing is None:
            params[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            params[name] = [existing, value]

    if not params:
        return ""
    return json.dumps(params, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def default_tag_prefix(request: Request) -> str:
    """Request path followed by its serialized query parameters."""
    return request.url.path + serialize_query(request)


async def resolve_tag_prefix(request: Request, tag_prefix: TagPrefix | None) -> str:
    """Resolve the tag prefix for one request.

    A non-empty string wins, then a callable of the request, then the
    path-and-query default.
    """
    if isinstance(tag_prefix, str) and tag_prefix:
        return tag_prefix
    if callable(tag_prefix):
        return str(await maybe_await(tag_prefix(request)))
    return default_tag_prefix(request)


async def resolve_tag_patterns(request: Request, tag_pattern: TagPattern | None) -> list[str]:
    """Resolve the configured tag pattern(s) to a list of non-empty fragments."""
    if callable(tag_pattern):
        tag_pattern = await maybe_await(tag_pattern(request))

    if not tag_pattern:
        return []
    if isinstance(tag_pattern, str):
        return [tag_pattern]
    return [fragment for fragment in tag_pattern if fragment]


def build_key(key_prefix: str, tag_prefix: str, tag: str) -> str:
    """Concatenate the three key components."""
    return key_prefix + tag_prefix + tag


def generate_etag(body: str | bytes) -> str:
    """Strong entity tag for a response body.

    Format is ``"<byte length in hex>-<first 27 chars of base64 SHA-1>"``,
    quotes included, so it can be sent back verbatim in If-None-Match.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")

    digest = base64.b64encode(hashlib.sha1(body).digest()).decode("ascii")[:27]
    return f'"{len(body):x}-{digest}"'
