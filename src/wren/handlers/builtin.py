"""Built-in handlers: status, headers, body writers, filters, short-circuits.

All of these are ordinary handlers built from the algebra in
``wren.handlers.algebra``. Writers call ``next`` so later handlers in a
chain still run; ``redirect_to``, ``halt`` and ``early_return`` stop the
chain.
"""

import json as json_module
from typing import Any

from wren.context import Context
from wren.handlers.algebra import Handler, HandlerFunc
from wren.routing.params import CONVERTERS, convert_param


def set_status_code(status: int) -> Handler:
    """Set the response status and continue."""

    def set_status(next: HandlerFunc) -> HandlerFunc:
        async def func(ctx: Context) -> Context | None:
            ctx.response.set_status(status)
            return await next(ctx)

        return func

    return set_status


def set_header(name: str, value: str) -> Handler:
    """Set a response header and continue."""

    def set_one_header(next: HandlerFunc) -> HandlerFunc:
        async def func(ctx: Context) -> Context | None:
            ctx.response.set_header(name, value)
            return await next(ctx)

        return func

    return set_one_header


def _writer(body: str | bytes, content_type: str, status: int | None) -> Handler:
    def write(next: HandlerFunc) -> HandlerFunc:
        async def func(ctx: Context) -> Context | None:
            if status is not None:
                ctx.response.set_status(status)
            ctx.response.set_content_type(content_type)
            ctx.response.set_body(body)
            return await next(ctx)

        return func

    return write


def text(body: str, *, status: int | None = None) -> Handler:
    """Write a ``text/plain`` body and continue."""
    return _writer(body, "text/plain; charset=utf-8", status)


def html(body: str, *, status: int | None = None) -> Handler:
    """Write a ``text/html`` body and continue."""
    return _writer(body, "text/html; charset=utf-8", status)


def json(data: Any, *, status: int | None = None) -> Handler:
    """Serialize *data* as JSON, write it, and continue.

    Serialization happens once, when the handler is built, so a value
    the ``json`` module cannot encode raises ``TypeError`` at declaration
    rather than per request.
    """
    body = json_module.dumps(data)
    return _writer(body, "application/json", status)


def redirect_to(location: str, *, permanent: bool = False) -> Handler:
    """Answer with a redirect and stop the chain."""
    status = 301 if permanent else 302

    def redirect(next: HandlerFunc) -> HandlerFunc:  # noqa: ARG001
        async def func(ctx: Context) -> Context | None:
            ctx.response.set_status(status)
            ctx.response.set_header("Location", location)
            return None

        return func

    return redirect


def http_method(*verbs: str) -> Handler:
    """Continue only if the request verb is one of *verbs*.

    A non-matching request returns ``None``, which makes ``choose`` move
    on to its next candidate.
    """
    allowed = frozenset(v.upper() for v in verbs)

    def method_filter(next: HandlerFunc) -> HandlerFunc:
        async def func(ctx: Context) -> Context | None:
            if ctx.request.method not in allowed:
                return None
            return await next(ctx)

        return func

    return method_filter


GET = http_method("GET", "HEAD")
POST = http_method("POST")
PUT = http_method("PUT")
DELETE = http_method("DELETE")


def halt(next: HandlerFunc) -> HandlerFunc:  # noqa: ARG001
    """Stop the chain without touching the response."""

    async def func(ctx: Context) -> Context | None:  # noqa: ARG001
        return None

    return func


def early_return(next: HandlerFunc) -> HandlerFunc:  # noqa: ARG001
    """Stop the chain, keeping the context as the result.

    Unlike ``halt``, the dispatcher still sees a present context, so the
    unwritten-response default applies if nothing was written.
    """

    async def func(ctx: Context) -> Context | None:
        return ctx

    return func


def route_value(
    ctx: Context,
    name: str,
    default: Any = None,
    *,
    convert: str | None = None,
) -> Any:
    """Read the route value *name*, failing soft.

    Returns *default* when the value is absent or, with *convert*, when it
    cannot be converted (``"int"``, ``"float"``, ``"bool"``, ``"uuid"`` ...).
    """
    value = ctx.route_value(name)
    if value is None:
        return default
    if convert is None:
        return value
    if convert not in CONVERTERS:
        msg = f"Unknown converter {convert!r}"
        raise ValueError(msg)
    try:
        return convert_param(value, convert)
    except ValueError:
        return default
