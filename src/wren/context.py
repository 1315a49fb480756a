"""Per-request context and its typed state bag.

Provides:
- ``Context``: one request/response exchange plus route values and state.
- ``StateKey`` / ``State``: a string-keyed heterogeneous container where
  every key carries the type of the value stored under it.
- ``current_context()``: the context of the request running in the
  current task.

A Context is created fresh by the dispatcher for every request and
dropped when the request is done. Nothing on it is shared across
requests.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from collections.abc import Iterator, Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, overload

from wren.http.request import Request
from wren.http.response import Response

# -- State bag --


@dataclass(frozen=True, slots=True)
class StateKey[T]:
    """A typed key into ``Context.state``.

    The namespace names the module that owns the key; only that module
    should write it. Declare keys once at module level::

        CURRENT_USER = StateKey("auth", "user", User)

        ctx.state[CURRENT_USER] = user
        user = ctx.state[CURRENT_USER]
    """

    namespace: str
    name: str
    type: type[T]

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}"

    def __repr__(self) -> str:
        return f"StateKey({self.qualified_name!r}, {self.type.__name__})"


class State:
    """Per-request values shared between the handlers of one chain.

    Values are stored by the key's qualified name and checked against the
    key's type on write, so a reader always gets what the key promises.
    """

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[str, tuple[StateKey[Any], Any]] = {}

    def __getitem__[T](self, key: StateKey[T]) -> T:
        try:
            return self._values[key.qualified_name][1]
        except KeyError:
            msg = f"No state stored for {key.qualified_name!r}"
            raise KeyError(msg) from None

    def __setitem__[T](self, key: StateKey[T], value: T) -> None:
        if not isinstance(value, key.type):
            msg = (
                f"State key {key.qualified_name!r} holds {key.type.__name__}, "
                f"got {type(value).__name__}"
            )
            raise TypeError(msg)
        self._values[key.qualified_name] = (key, value)

    def __delitem__(self, key: StateKey[Any]) -> None:
        try:
            del self._values[key.qualified_name]
        except KeyError:
            msg = f"No state stored for {key.qualified_name!r}"
            raise KeyError(msg) from None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, StateKey) and key.qualified_name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[StateKey[Any]]:
        return (key for key, _ in self._values.values())

    @overload
    def get[T](self, key: StateKey[T]) -> T | None: ...
    @overload
    def get[T](self, key: StateKey[T], default: T) -> T: ...
    def get(self, key: StateKey[Any], default: Any = None) -> Any:
        """Return the value for *key*, or *default* if it was never set."""
        entry = self._values.get(key.qualified_name)
        return default if entry is None else entry[1]

    def __repr__(self) -> str:
        items = ", ".join(f"{name!r}: {value!r}" for name, (_, value) in self._values.items())
        return f"<State {{{items}}}>"


# -- Lifetime --


class RequestLifetime:
    """Tracks whether the client is still waiting for this request.

    The server layer calls ``abort()`` when the host reports a
    disconnect; handlers doing long CPU-bound work can poll
    ``ctx.aborted`` between steps. Awaiting handlers are cancelled
    outright.
    """

    __slots__ = ("_aborted",)

    def __init__(self) -> None:
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        self._aborted = True


# -- Context --


class Context:
    """One HTTP exchange as seen by a handler chain.

    Handlers read ``request`` and ``route_values``, write to ``response``
    and pass data to later handlers through ``state``.
    """

    __slots__ = ("_route_values", "lifetime", "request", "response", "state")

    def __init__(
        self,
        request: Request,
        *,
        route_values: Mapping[str, str] | None = None,
        response: Response | None = None,
        lifetime: RequestLifetime | None = None,
    ) -> None:
        self.request = request
        self.response = response if response is not None else Response()
        self.state = State()
        self._route_values: dict[str, str] = dict(route_values or {})
        self.lifetime = lifetime if lifetime is not None else RequestLifetime()

    @property
    def route_values(self) -> Mapping[str, str]:
        """Values bound from the route pattern (read-only view)."""
        return MappingProxyType(self._route_values)

    def route_value(self, name: str, default: str | None = None) -> str | None:
        """Return the route value *name*, or *default* when absent."""
        return self._route_values.get(name, default)

    def set_route_value(self, name: str, value: str) -> None:
        """Bind or overwrite a route value for the rest of the chain."""
        self._route_values[name] = value

    @property
    def aborted(self) -> bool:
        """True once the client went away before the chain finished."""
        return self.lifetime.aborted

    def __repr__(self) -> str:
        return f"<Context {self.request.method} {self.request.path}>"


# -- Current context --

context_var: ContextVar[Context] = ContextVar("wren_context")
"""The context of the running request. Set by the dispatcher."""


def current_context() -> Context:
    """Return the context of the request running in this task.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()
