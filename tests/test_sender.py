"""Tests for wren.server.sender response emission rules."""

from wren.http.response import Response
from wren.server.sender import send_response


async def _send(response: Response, *, head: bool = False) -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send, head=head)
    return messages


def _response(body: str, status: int = 200) -> Response:
    response = Response()
    response.write(body)
    response.set_status(status)
    return response


class TestSendResponse:
    async def test_200_preserves_body(self) -> None:
        messages = await _send(_response("ok"))
        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"2"
        assert headers[b"content-type"] == b"text/plain; charset=utf-8"
        assert messages[1] == {"type": "http.response.body", "body": b"ok"}

    async def test_204_drops_body(self) -> None:
        messages = await _send(_response("unexpected-body", 204))
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    async def test_304_drops_body(self) -> None:
        messages = await _send(_response("unexpected-body", 304))
        assert messages[1]["body"] == b""

    async def test_head_keeps_length_drops_body(self) -> None:
        messages = await _send(_response("hello"), head=True)
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"5"
        assert messages[1]["body"] == b""

    async def test_header_names_lowered(self) -> None:
        response = _response("ok")
        response.set_header("X-Trace", "abc")
        messages = await _send(response)
        assert (b"x-trace", b"abc") in messages[0]["headers"]

    async def test_explicit_content_type_header_wins(self) -> None:
        response = _response("{}")
        response.set_header("Content-Type", "application/problem+json")
        messages = await _send(response)
        content_types = [v for k, v in messages[0]["headers"] if k == b"content-type"]
        assert content_types == [b"application/problem+json"]
