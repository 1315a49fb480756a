"""Immutable HTTP request view.

Frozen metadata with async body access. Handlers read the request; they
never replace it. Everything a handler changes lives on the response or
in the context's state bag.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from wren._internal.asgi import Receive, Scope
from wren.errors import PayloadTooLarge
from wren.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query string) is frozen at creation.
    The body is read asynchronously via ``.stream()``, ``.body()``,
    ``.text()`` or ``.json()``.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: ASGI-style receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body size limit in bytes (None = unlimited)
    _max_body: int | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for the body (the dict is mutable even though
    # the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def query(self) -> dict[str, str]:
        """Query parameters, first value wins."""
        params: dict[str, str] = {}
        for key, value in parse_qsl(self.query_string.decode("latin-1"), keep_blank_values=True):
            params.setdefault(key, value)
        return params

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks.

        The underlying receive channel is consumed once; after ``.body()``
        has run, the cached bytes are yielded instead.
        """
        if "_body" in self._cache:
            if self._cache["_body"]:
                yield self._cache["_body"]
            return
        if self._receive is None or self._cache.get("_consumed"):
            return
        self._cache["_consumed"] = True

        received = 0
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            chunk = message.get("body", b"")
            if chunk:
                received += len(chunk)
                if self._max_body is not None and received > self._max_body:
                    raise PayloadTooLarge(self._max_body)
                yield chunk
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the receive channel is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        raw = await self.body()
        return json_module.loads(raw)

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Scope,
        receive: Receive | None = None,
        *,
        max_body: int | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
            _max_body=max_body,
        )
