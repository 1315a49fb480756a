"""Handlers — the composable unit of request processing.

A handler turns "the rest of the pipeline" into "a new rest of the
pipeline". ``compose`` glues handlers together; returning ``None``
anywhere stops the chain.
"""

from wren.handlers.algebra import (
    Handler,
    HandlerFunc,
    choose,
    compose,
    finish,
    handler,
    identity,
)
from wren.handlers.builtin import (
    DELETE,
    GET,
    POST,
    PUT,
    early_return,
    halt,
    html,
    http_method,
    json,
    redirect_to,
    route_value,
    set_header,
    set_status_code,
    text,
)

__all__ = [
    "DELETE",
    "GET",
    "POST",
    "PUT",
    "Handler",
    "HandlerFunc",
    "choose",
    "compose",
    "early_return",
    "finish",
    "halt",
    "handler",
    "html",
    "http_method",
    "identity",
    "json",
    "redirect_to",
    "route_value",
    "set_header",
    "set_status_code",
    "text",
]
