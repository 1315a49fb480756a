"""Error handling for wren requests.

Maps ``HTTPError`` exceptions and unexpected handler faults to
responses. Runs at the dispatcher boundary only; the handler algebra
itself never catches anything.
"""

import logging
from collections.abc import Callable
from http import HTTPStatus

from wren.context import Context
from wren.errors import HTTPError
from wren.handlers.algebra import Handler, finish

logger = logging.getLogger("wren.server")

# Builds a handler that renders a fault: ``error_handler(exc) -> Handler``
type ErrorHandler = Callable[[Exception], Handler]


def status_phrase(status: int) -> str:
    """Reason phrase for *status*, or the bare number if unknown."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


def write_default(ctx: Context, status: int, detail: str | None = None) -> None:
    """Replace the response with a plain-text status answer.

    Success statuses get an empty body; errors get *detail* or the
    reason phrase.
    """
    response = ctx.response
    response.reset()
    response.set_status(status)
    if status >= 400:
        response.write(detail or status_phrase(status))


def handle_http_error(exc: HTTPError, ctx: Context) -> None:
    """Answer with the status carried by *exc*."""
    logger.debug(
        "%d %s %s — %s", exc.status, ctx.request.method, ctx.request.path, exc.detail
    )
    write_default(ctx, exc.status, exc.detail)
    for name, value in exc.headers:
        ctx.response.add_header(name, value)


async def handle_internal_error(
    exc: Exception,
    ctx: Context,
    error_handler: ErrorHandler | None,
    debug: bool,
) -> None:
    """Turn an unexpected fault into a 500 response.

    A user *error_handler* gets the first chance to render it; if that
    handler fails too, or leaves the response unwritten, the plain 500
    is used.
    """
    logger.exception("500 %s %s", ctx.request.method, ctx.request.path)

    if error_handler is not None:
        ctx.response.reset()
        try:
            await error_handler(exc)(finish)(ctx)
        except Exception:
            logger.exception("error handler failed for %s %s", ctx.request.method, ctx.request.path)
        else:
            if ctx.response.is_written:
                return

    detail = f"Internal Server Error: {exc!r}" if debug else "Internal Server Error"
    write_default(ctx, 500, detail)
