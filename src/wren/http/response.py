"""Mutable HTTP response builder.

One ``Response`` lives on each ``Context``. Handlers set the status,
headers and body in place; the dispatcher sends it once the chain is
done. The body is buffered, so a fault halfway through a chain can still
be turned into a clean 500.
"""

from dataclasses import dataclass, field


@dataclass(slots=True)
class Response:
    """An HTTP response built incrementally by handlers.

    ``is_written`` becomes true as soon as a handler assigns a status or
    writes body data. A chain that ends with an unwritten response gets
    the dispatcher's default answer.
    """

    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: list[tuple[str, str]] = field(default_factory=list)
    _chunks: list[bytes] = field(default_factory=list, repr=False)
    _written: bool = field(default=False, repr=False)

    # -- Mutation --

    def set_status(self, status: int) -> None:
        """Assign the status code."""
        self.status = status
        self._written = True

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing any existing values for *name*."""
        lowered = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != lowered]
        self.headers.append((name, value))

    def add_header(self, name: str, value: str) -> None:
        """Append a header value, keeping existing ones (e.g. ``Set-Cookie``)."""
        self.headers.append((name, value))

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value set for *name*."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    def set_content_type(self, content_type: str) -> None:
        self.content_type = content_type

    def write(self, data: str | bytes) -> None:
        """Append *data* to the body. Strings are encoded as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif not isinstance(data, (bytes, bytearray)):
            msg = f"Response body must be str or bytes, got {type(data).__name__}"
            raise TypeError(msg)
        self._chunks.append(bytes(data))
        self._written = True

    def set_body(self, data: str | bytes) -> None:
        """Replace the whole body with *data*."""
        self._chunks.clear()
        self.write(data)

    def reset(self) -> None:
        """Discard everything written so far (used before error responses)."""
        self.status = 200
        self.content_type = "text/plain; charset=utf-8"
        self.headers.clear()
        self._chunks.clear()
        self._written = False

    # -- Inspection --

    @property
    def is_written(self) -> bool:
        """True once a status was assigned or body data written."""
        return self._written

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        return b"".join(self._chunks)

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body_bytes.decode("utf-8")

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """Headers encoded for ASGI, names lower-cased.

        ``content-type`` comes first unless a handler set it as a plain
        header. Raises if a name or value is not a latin-1 ``str``.
        """
        raw: list[tuple[bytes, bytes]] = []
        if self.get_header("content-type") is None:
            raw.append((b"content-type", self.content_type.encode("latin-1")))
        for name, value in self.headers:
            raw.append((name.lower().encode("latin-1"), value.encode("latin-1")))
        return raw
