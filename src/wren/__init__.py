"""Wren — composable, short-circuiting HTTP handlers for ASGI.

An application is a list of routes; each route's handler is a pipeline
of small functions glued together with ``compose``. Any step can stop
the chain by returning ``None``.

Basic usage::

    from wren import App, compose, get, set_status_code, text

    app = App([
        get("/", text("hello world")),
        get("/teapot", compose(set_status_code(418), text("short and stout"))),
    ])

Serve ``app`` with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "ANY_METHOD",
    "DELETE",
    "GET",
    "POST",
    "PUT",
    "App",
    "AppConfig",
    "ConfigurationError",
    "Context",
    "HTTPError",
    "Handler",
    "HandlerFunc",
    "NotFound",
    "PayloadTooLarge",
    "Request",
    "Response",
    "RouteEntry",
    "RouteTable",
    "StateKey",
    "WrenError",
    "any_method",
    "choose",
    "compose",
    "current_context",
    "delete",
    "early_return",
    "finish",
    "get",
    "halt",
    "handler",
    "html",
    "http_method",
    "identity",
    "json",
    "post",
    "put",
    "redirect_to",
    "route",
    "route_value",
    "set_header",
    "set_status_code",
    "text",
]

_HANDLER_NAMES = frozenset(
    {
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
    }
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in ("Context", "StateKey", "current_context"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in _HANDLER_NAMES:
        from wren import handlers as _handlers

        return getattr(_handlers, name)

    if name in ("ANY_METHOD", "RouteEntry", "any_method", "delete", "get", "post", "put", "route"):
        from wren.routing import route as _route

        return getattr(_route, name)

    if name == "RouteTable":
        from wren.routing.router import RouteTable

        return RouteTable

    if name in ("ConfigurationError", "HTTPError", "NotFound", "PayloadTooLarge", "WrenError"):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
