"""Hello World — the smallest useful wren app.

Demonstrates composed handlers, typed route values, verb dispatch with
``choose``, the typed state bag, and a custom not-found handler.

Run with any ASGI server, e.g.:
    uvicorn app:app
"""

from wren import (
    POST,
    App,
    Context,
    StateKey,
    any_method,
    choose,
    compose,
    get,
    handler,
    json,
    route_value,
    set_header,
    set_status_code,
    text,
)

VISITOR = StateKey("hello", "visitor", str)


@handler
def remember_visitor(ctx: Context) -> Context:
    ctx.state[VISITOR] = route_value(ctx, "name", "stranger")
    return ctx


@handler
def greet(ctx: Context) -> Context:
    ctx.response.write(f"Hello, {ctx.state[VISITOR]}!")
    return ctx


@handler
def not_found(ctx: Context) -> Context:
    ctx.response.set_status(404)
    ctx.response.write(f"Nothing at {ctx.request.path}")
    return ctx


app = App(
    [
        get("/", compose(set_status_code(200), text("hello world"))),
        get("/hello/{name:alpha}", compose(remember_visitor, greet)),
        get("/api/status", json({"status": "ok", "version": "0.1.0"})),
        any_method(
            "/custom",
            choose(
                compose(POST, set_header("X-Custom", "wren"), text("Created", status=201)),
                text("GET or anything else"),
            ),
        ),
    ],
    not_found=not_found,
)
