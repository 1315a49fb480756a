"""RouteEntry, PathSegment and RouteMatch frozen dataclasses."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from wren.handlers.algebra import Handler

# Entry verb meaning "any HTTP method"
ANY_METHOD = "*"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:  ``/users``    (is_param=False)
    Param:    ``/{id}``     (is_param=True, param_name="id")
    Typed:    ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One declared route: verb, path pattern, handler.

    The pattern is parsed when the entry is created, so a malformed
    pattern fails at declaration time.
    """

    method: str
    pattern: str
    handler: Handler
    segments: tuple[PathSegment, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        from wren.routing.router import parse_path

        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "segments", tuple(parse_path(self.pattern)))

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.param_name for s in self.segments if s.param_name is not None)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    entry: RouteEntry
    route_values: Mapping[str, str]


# -- Declaration helpers --


def route(method: str, pattern: str, handler: Handler) -> RouteEntry:
    """Declare a route for *method* (or ``ANY_METHOD``)."""
    return RouteEntry(method, pattern, handler)


def get(pattern: str, handler: Handler) -> RouteEntry:
    return RouteEntry("GET", pattern, handler)


def post(pattern: str, handler: Handler) -> RouteEntry:
    return RouteEntry("POST", pattern, handler)


def put(pattern: str, handler: Handler) -> RouteEntry:
    return RouteEntry("PUT", pattern, handler)


def delete(pattern: str, handler: Handler) -> RouteEntry:
    return RouteEntry("DELETE", pattern, handler)


def any_method(pattern: str, handler: Handler) -> RouteEntry:
    return RouteEntry(ANY_METHOD, pattern, handler)
