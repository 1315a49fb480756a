"""Route table with ordered, first-match-wins matching.

Entries are collected once at startup into an immutable tuple. Matching
scans them in registration order; the first entry whose verb and whole
path match wins, and later entries are never consulted.
"""

import logging
from collections.abc import Iterable, Iterator

from wren.errors import ConfigurationError, NotFound
from wren.routing.params import CONVERTERS, segment_matches
from wren.routing.route import ANY_METHOD, PathSegment, RouteEntry, RouteMatch

logger = logging.getLogger("wren.routing")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern string into segments.

    Examples::

        "/users"            -> [PathSegment("users")]
        "/users/{id}"       -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/hello/{name:alpha}" -> [..., PathSegment("{name:alpha}", ..., param_type="alpha")]

    Raises ``ConfigurationError`` for Flask-style ``<param>`` segments,
    empty or duplicate parameter names, and unknown constraints.
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route {path!r} uses <param> syntax; "
                "wren expects {param} or {param:constraint}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if not param_name.isidentifier():
                msg = f"Route {path!r} has an invalid parameter name {param_name!r}."
                raise ConfigurationError(msg)
            if param_name in seen:
                msg = f"Route {path!r} declares parameter {param_name!r} twice."
                raise ConfigurationError(msg)
            if param_type not in CONVERTERS:
                known = ", ".join(sorted(CONVERTERS))
                msg = (
                    f"Route {path!r} uses unknown constraint {param_type!r} "
                    f"(known: {known})."
                )
                raise ConfigurationError(msg)
            seen.add(param_name)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def _split_path(path: str) -> list[str]:
    """Split a request path. Inner empty segments are kept, so ``//`` never matches."""
    stripped = path.strip("/")
    return stripped.split("/") if stripped else []


def _method_matches(entry: RouteEntry, method: str) -> bool:
    if entry.method in (ANY_METHOD, method):
        return True
    # HEAD is served by GET entries
    return method == "HEAD" and entry.method == "GET"


def _bind(segments: tuple[PathSegment, ...], parts: list[str]) -> dict[str, str] | None:
    """Match *parts* against *segments*, all or nothing."""
    if len(segments) != len(parts):
        return None
    values: dict[str, str] = {}
    for seg, part in zip(segments, parts, strict=True):
        if seg.is_param:
            if not segment_matches(part, seg.param_type):
                return None
            values[seg.param_name or ""] = part
        elif seg.value != part:
            return None
    return values


class RouteTable:
    """Immutable ordered collection of route entries.

    Usage::

        table = RouteTable([
            get("/", text("hello world")),
            get("/hello/{name:alpha}", greet),
        ])
        match = table.match("GET", "/hello/world")

    Built once and then only read, so one table can serve any number of
    concurrent requests without locking.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[RouteEntry] = ()) -> None:
        collected = tuple(entries)
        for entry in collected:
            if not isinstance(entry, RouteEntry):
                msg = f"Route table entries must be RouteEntry, got {type(entry).__name__}"
                raise ConfigurationError(msg)
        self._entries: tuple[RouteEntry, ...] = collected

    @property
    def entries(self) -> tuple[RouteEntry, ...]:
        """All entries in registration order."""
        return self._entries

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the first entry matching *method* and *path*.

        Returns a ``RouteMatch`` with the bound route values.
        Raises ``NotFound`` if no entry matches. A segment failing its
        constraint only rules out that entry; scanning continues.
        """
        method = method.upper()
        parts = _split_path(path)
        for entry in self._entries:
            if not _method_matches(entry, method):
                continue
            values = _bind(entry.segments, parts)
            if values is not None:
                return RouteMatch(entry=entry, route_values=values)

        logger.debug("no route for %s %s", method, path)
        raise NotFound(f"No route matches {method} {path!r}")
