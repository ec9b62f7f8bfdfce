from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from etag_cache.errors import SerializationError

HeaderValue = str | list[str]


class CacheEntry(BaseModel):
    """A captured response as stored in the cache.

    Header names are lower-case; a header sent more than once (set-cookie,
    vary, ...) is kept as a list in the order it was sent.
    """

    status_code: int = Field(..., ge=100, le=599)
    headers: dict[str, HeaderValue] = Field(default_factory=dict)
    body: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def snapshot(
        cls,
        status_code: int,
        headers: Iterable[tuple[str, str]],
        body: str,
    ) -> "CacheEntry":
        """Build an entry from live response state.

        Args:
            status_code: Final HTTP status
            headers: (name, value) pairs, repeats allowed
            body: Decoded response body

        Returns:
            The immutable entry
        """
        grouped: dict[str, HeaderValue] = {}
        for name, value in headers:
            name = name.lower()
            existing = grouped.get(name)
            if existing is None:
                grouped[name] = value
            elif isinstance(existing, list):
                existing.append(value)
            else:
                grouped[name] = [existing, value]
        return cls(status_code=status_code, headers=grouped, body=body)

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """Expand headers into ASGI (name, value) byte pairs."""
        raw: list[tuple[bytes, bytes]] = []
        for name, value in self.headers.items():
            values = value if isinstance(value, list) else [value]
            for item in values:
                raw.append((name.encode("latin-1"), item.encode("latin-1")))
        return raw

    def encode(self) -> str:
        """Serialize to the JSON text stored in the backend."""
        return self.model_dump_json()

    @classmethod
    def decode(cls, raw: str | bytes) -> "CacheEntry":
        """Parse a stored value.

        Raises:
            SerializationError: If the value is not a valid entry
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(
                f"Malformed cache entry: {e.error_count()} validation error(s)",
                details={"errors": e.errors(include_url=False)},
            ) from e
