"""Wren application class.

An ``App`` is built from a declarative list of route entries. The route
table is compiled once in the constructor and never changes afterwards;
the app is then just an ASGI 3 callable that any ASGI server can host.
"""

import logging
from collections.abc import Iterable

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.handlers.algebra import Handler
from wren.routing.route import RouteEntry
from wren.routing.router import RouteTable
from wren.server.dispatcher import Dispatcher
from wren.server.errors import ErrorHandler
from wren.server.handler import handle_request

logger = logging.getLogger("wren.server")


class App:
    """The wren application.

    Usage::

        from wren import App, compose, get, set_status_code, text

        app = App([
            get("/", text("hello world")),
            get("/hello/{name:alpha}", greet),
        ])

    Args:
        routes: Route entries in priority order; the first match wins.
        config: Application configuration.
        not_found: Handler run when no route matches. Defaults to a
            plain 404.
        error_handler: ``exc -> Handler`` used to render unexpected
            faults. Defaults to a plain 500.

    Thread safety:
        Everything the app holds is immutable after construction, so a
        single instance serves concurrent requests without locks.
    """

    __slots__ = ("_dispatcher", "config", "routes")

    def __init__(
        self,
        routes: Iterable[RouteEntry] | RouteTable,
        config: AppConfig | None = None,
        *,
        not_found: Handler | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.routes: RouteTable = routes if isinstance(routes, RouteTable) else RouteTable(routes)
        self._dispatcher = Dispatcher(
            self.routes,
            self.config,
            not_found=not_found,
            error_handler=error_handler,
        )
        logger.debug("route table built with %d entries", len(self.routes))

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Acknowledges lifespan scopes and delegates HTTP scopes to the
        request pipeline. Other scope types are ignored.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(scope, receive, send, dispatcher=self._dispatcher)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Answer the ASGI lifespan protocol. Wren has nothing to set up."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
