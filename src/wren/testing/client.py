"""Async test client for wren applications.

Drives the app through its ASGI interface in-process — no sockets, no
server. The same dispatcher, pump and sender run as in production.
"""

from __future__ import annotations

import asyncio
import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wren._internal.asgi import Message
from wren.app import App
from wren.http.headers import Headers


@dataclass(frozen=True, slots=True)
class TestResponse:
    """What the app sent back for one request."""

    __test__ = False  # Tell pytest this is not a test class

    status: int
    headers: Headers
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "") or ""

    def json(self) -> Any:
        return json_module.loads(self.body)


class TestClient:
    """Async test client for wren applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> TestClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: object = None,
    ) -> TestResponse:
        """Send a POST request, optionally with a JSON body."""
        extra_headers: dict[str, str] = {}
        request_body = body or b""
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"
        merged = {**extra_headers, **(headers or {})}
        return await self.request("POST", path, headers=merged, body=request_body)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TestResponse:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
        chunk_size: int | None = None,
    ) -> TestResponse:
        """Send one request and collect the response.

        With *chunk_size*, the body is delivered in several
        ``http.request`` messages, as a real server would.
        """
        scope = _build_scope(method, path, headers, body)
        receive = _body_receiver(body or b"", chunk_size, asyncio.Event())
        sent: list[Message] = []

        async def send(message: Message) -> None:
            sent.append(message)

        await self.app(scope, receive, send)
        return _collect(sent)

    async def disconnect_during(
        self,
        method: str,
        path: str,
        *,
        after: float,
        headers: Mapping[str, str] | None = None,
    ) -> list[Message]:
        """Send a request, then disconnect the client after *after* seconds.

        Returns the raw ASGI messages the app sent (empty when the
        request was cancelled before answering).
        """
        scope = _build_scope(method, path, headers, None)
        disconnect = asyncio.Event()
        receive = _body_receiver(b"", None, disconnect)
        sent: list[Message] = []

        async def send(message: Message) -> None:
            sent.append(message)

        app_task = asyncio.create_task(self.app(scope, receive, send))
        await asyncio.sleep(after)
        disconnect.set()
        await asyncio.wait_for(app_task, timeout=5.0)
        return sent


def _build_scope(
    method: str,
    path: str,
    headers: Mapping[str, str] | None,
    body: bytes | None,
) -> dict[str, Any]:
    if "?" in path:
        path_part, query_string = path.split("?", 1)
    else:
        path_part, query_string = path, ""

    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    if body:
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "path": path_part,
        "raw_path": path_part.encode("latin-1"),
        "query_string": query_string.encode("latin-1"),
        "root_path": "",
        "headers": raw_headers,
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


def _body_receiver(body: bytes, chunk_size: int | None, disconnect: asyncio.Event):
    """Deliver *body*, then block until *disconnect* is set."""
    size = chunk_size or len(body) or 1
    chunks = [body[i : i + size] for i in range(0, len(body), size)] or [b""]
    pending = list(chunks)

    async def receive() -> Message:
        if pending:
            chunk = pending.pop(0)
            return {"type": "http.request", "body": chunk, "more_body": bool(pending)}
        await disconnect.wait()
        return {"type": "http.disconnect"}

    return receive


def _collect(sent: list[Message]) -> TestResponse:
    status = 0
    raw_headers: list[tuple[bytes, bytes]] = []
    body_parts: list[bytes] = []
    for message in sent:
        if message["type"] == "http.response.start":
            status = message["status"]
            raw_headers.extend(message.get("headers", []))
        elif message["type"] == "http.response.body":
            body_parts.append(message.get("body", b""))
    return TestResponse(status=status, headers=Headers(raw_headers), body=b"".join(body_parts))
