"""Handler types and the composition operator.

A handler function takes a Context and eventually returns either a
Context ("continue with this") or ``None`` ("done, stop here")::

    async def func(ctx: Context) -> Context | None: ...

A handler is one step removed: given the rest of the pipeline (``next``),
it returns the function to run at its own position::

    def log_path(next: HandlerFunc) -> HandlerFunc:
        async def func(ctx: Context) -> Context | None:
            logger.info("path=%s", ctx.request.path)
            return await next(ctx)

        return func

No base class and no registration. Any callable with this shape is a
handler, and ``compose`` glues them together.

Composition is Kleisli composition over "eventual optional Context":
``compose(a, b)(next) == a(b(next))``. It is associative, ``identity`` is
its unit, and it never catches exceptions. Faults surface at the
dispatcher.
"""

from collections.abc import Awaitable, Callable
from functools import reduce
from typing import Any

from wren._internal.invoke import invoke
from wren.context import Context

# The continuation: everything scheduled to run after the current step
type HandlerFunc = Callable[[Context], Awaitable[Context | None]]

# A transformation of "rest of pipeline" into "new rest of pipeline"
type Handler = Callable[[HandlerFunc], HandlerFunc]


async def finish(ctx: Context) -> Context | None:
    """Terminal continuation: end of chain, hand the context back."""
    return ctx


def identity(next: HandlerFunc) -> HandlerFunc:
    """The unit of ``compose``: forwards the context unchanged."""
    return next


def _compose2(first: Handler, second: Handler) -> Handler:
    def composed(next: HandlerFunc) -> HandlerFunc:
        return first(second(next))

    return composed


def compose(*handlers: Handler) -> Handler:
    """Compose handlers left to right into one handler.

    ``compose(a, b)`` runs ``a`` first; if ``a`` returns ``None`` the
    chain stops and ``b`` never runs, otherwise the context ``a`` passed
    on is fed into ``b``, which continues with the caller's ``next``::

        app_handler = compose(require_json, parse_body, text("ok"))

    ``compose()`` is ``identity`` and ``compose(h)`` is ``h``.
    """
    if not handlers:
        return identity
    return reduce(_compose2, handlers)


def choose(*handlers: Handler) -> Handler:
    """Try *handlers* in order; the first one that continues wins.

    Each candidate runs with the same downstream ``next`` on the same
    context. If a candidate returns ``None`` the next candidate is
    tried; if every candidate returns ``None``, so does ``choose``.
    A candidate that wrote a response and then short-circuited still
    counts as "returned ``None``", so put filters first.
    """

    def chosen(next: HandlerFunc) -> HandlerFunc:
        funcs = [h(next) for h in handlers]

        async def func(ctx: Context) -> Context | None:
            for candidate in funcs:
                result = await candidate(ctx)
                if result is not None:
                    return result
            return None

        return func

    return chosen


def handler(func: Callable[[Context], Any]) -> Handler:
    """Lift a plain context function into a handler.

    *func* may be ``def`` or ``async def``. It receives the context and
    returns a Context to continue or ``None`` to stop::

        @handler
        async def greet(ctx: Context) -> Context:
            ctx.response.write(f"hi {ctx.route_value('name')}")
            return ctx
    """

    def lifted(next: HandlerFunc) -> HandlerFunc:
        async def run(ctx: Context) -> Context | None:
            result = await invoke(func, ctx)
            if result is None:
                return None
            return await next(result)

        return run

    lifted.__name__ = getattr(func, "__name__", "handler")
    lifted.__doc__ = getattr(func, "__doc__", None)
    return lifted
