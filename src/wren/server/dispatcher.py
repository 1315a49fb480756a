"""Dispatcher — runs one request through the route table and its handler.

Per request:

1. Match verb and path against the ``RouteTable``.
2. No match: answer 404 (or run the app's ``not_found`` handler).
3. Match: build a fresh ``Context`` with the bound route values.
4. Run the entry's handler with ``finish`` as the end of the chain.
5. Reconcile the result: ``None`` means the chain finalized the
   response itself; a present context with nothing written gets the
   ``AppConfig.unhandled_status`` default.

Faults raised by handlers stop here. ``HTTPError`` keeps its status;
anything else becomes a 500, as does a response whose headers cannot
be encoded for the wire.
"""

import logging

import anyio

from wren.config import AppConfig
from wren.context import Context, RequestLifetime, context_var
from wren.errors import HTTPError, NotFound
from wren.handlers.algebra import Handler, finish
from wren.http.request import Request
from wren.http.response import Response
from wren.routing.router import RouteTable
from wren.server.errors import (
    ErrorHandler,
    handle_http_error,
    handle_internal_error,
    write_default,
)

logger = logging.getLogger("wren.server")


class Dispatcher:
    """Translates one request into a matched route, a Context and a response.

    Holds only read-only state (the route table, config and the optional
    fallback handlers), so one dispatcher serves concurrent requests.
    """

    __slots__ = ("config", "error_handler", "not_found", "routes")

    def __init__(
        self,
        routes: RouteTable,
        config: AppConfig | None = None,
        *,
        not_found: Handler | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.routes = routes
        self.config = config or AppConfig()
        self.not_found = not_found
        self.error_handler = error_handler

    async def dispatch(
        self,
        request: Request,
        *,
        lifetime: RequestLifetime | None = None,
    ) -> Response:
        """Process *request* and return the finalized response."""
        try:
            match = self.routes.match(request.method, request.path)
        except NotFound as exc:
            ctx = Context(request, lifetime=lifetime)
            final = await self._answer_not_found(ctx, exc)
            return await self._finalize(final)

        ctx = Context(request, route_values=match.route_values, lifetime=lifetime)
        token = context_var.set(ctx)
        try:
            final = await self._run(ctx, match.entry.handler, self.config.unhandled_status)
        finally:
            context_var.reset(token)
        return await self._finalize(final)

    async def _run(self, ctx: Context, handler: Handler, unhandled_status: int) -> Context:
        """Run *handler* on *ctx* and reconcile its outcome.

        Returns the context whose response should be sent: the one the
        chain handed back, or *ctx* when the chain stopped or failed.
        """
        timeout = self.config.request_timeout
        result: Context | None = None
        try:
            with anyio.move_on_after(timeout) as scope:
                result = await handler(finish)(ctx)
        except HTTPError as exc:
            handle_http_error(exc, ctx)
            return ctx
        except Exception as exc:
            await handle_internal_error(exc, ctx, self.error_handler, self.config.debug)
            return ctx

        if scope.cancelled_caught:
            logger.warning(
                "%s %s exceeded request_timeout=%ss",
                ctx.request.method,
                ctx.request.path,
                timeout,
            )
            write_default(ctx, 503)
            return ctx

        if result is None:
            return ctx
        if not result.response.is_written:
            write_default(result, unhandled_status)
        return result

    async def _answer_not_found(self, ctx: Context, exc: NotFound) -> Context:
        if self.not_found is None:
            handle_http_error(exc, ctx)
            return ctx

        token = context_var.set(ctx)
        try:
            final = await self._run(ctx, self.not_found, exc.status)
        finally:
            context_var.reset(token)
        if not final.response.is_written:
            handle_http_error(exc, final)
        return final

    async def _finalize(self, ctx: Context) -> Response:
        """Return the response to send, or a plain 500 if it cannot be encoded.

        Header values are encoded only here, after the chain has finished,
        so a bad value set by a handler is still a handler fault.
        """
        try:
            ctx.response.raw_headers()
        except Exception as exc:
            await handle_internal_error(exc, ctx, None, self.config.debug)
        return ctx.response
