"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly. Builds the Request,
owns ``receive()`` for the lifetime of the request, runs the dispatcher
and sends the finished Response.

Cancellation:
    One pump task is the sole reader of ``receive()``. It forwards body
    messages to the Request over an in-memory channel and watches for
    ``http.disconnect``. On disconnect it marks the request lifetime as
    aborted and cancels the dispatcher, so every awaiting handler in the
    chain is interrupted at its next checkpoint. Nothing is sent for an
    aborted request. Once the body passes ``max_content_length`` the pump
    stops reading, so an unread oversized body is never buffered.
"""

import logging
import math

import anyio
from anyio import CancelScope
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from wren._internal.asgi import Message, Receive, Scope, Send
from wren.context import RequestLifetime
from wren.http.request import Request
from wren.http.response import Response
from wren.server.dispatcher import Dispatcher
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")

_END_OF_BODY: Message = {"type": "http.request", "body": b"", "more_body": False}


async def _pump_receive(
    receive: Receive,
    body: MemoryObjectSendStream[Message],
    lifetime: RequestLifetime,
    scope: CancelScope,
    max_body: int | None,
) -> None:
    """Forward body messages until the body ends, then wait for disconnect.

    The chunk that takes the body past *max_body* bytes is still
    forwarded, so reading the body raises ``PayloadTooLarge``; after it
    the pump stops reading from the client.
    """
    received = 0
    async with body:
        while True:
            message = await receive()
            if message.get("type") == "http.disconnect":
                lifetime.abort()
                scope.cancel()
                return
            received += len(message.get("body", b""))
            await body.send(message)
            if max_body is not None and received > max_body:
                logger.debug("request body exceeds %d bytes, no longer receiving", max_body)
                return
            if not message.get("more_body", False):
                break

    # Body is complete — keep listening so a disconnect still cancels
    while True:
        message = await receive()
        if message.get("type") == "http.disconnect":
            lifetime.abort()
            scope.cancel()
            return


def _channel_receive(body: MemoryObjectReceiveStream[Message]) -> Receive:
    async def receive() -> Message:
        try:
            return await body.receive()
        except anyio.EndOfStream:
            return dict(_END_OF_BODY)

    return receive


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    lifetime = RequestLifetime()
    body_send, body_receive = anyio.create_memory_object_stream(math.inf)
    request = Request.from_asgi(
        scope,
        _channel_receive(body_receive),
        max_body=dispatcher.config.max_content_length,
    )

    response: Response | None = None
    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(
                _pump_receive,
                receive,
                body_send,
                lifetime,
                tg.cancel_scope,
                dispatcher.config.max_content_length,
            )
            response = await dispatcher.dispatch(request, lifetime=lifetime)
            tg.cancel_scope.cancel()
    finally:
        body_send.close()
        body_receive.close()

    if lifetime.aborted or response is None:
        logger.debug("client disconnected during %s %s", request.method, request.path)
        return

    await send_response(response, send, head=request.method == "HEAD")
