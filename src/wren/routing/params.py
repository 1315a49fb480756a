"""Path parameter constraints and conversion.

Built-in constraints for route segments like ``{id:int}``. Each maps to
a full-match regex over one path segment and a Python type used when a
handler asks for a converted value.
"""

import re
import uuid


def _to_bool(value: str) -> bool:
    return value.lower() == "true"


# (regex_pattern, converter) for each supported constraint
CONVERTERS: dict[str, tuple[str, type | object]] = {
    "str": (r"[^/]+", str),
    "alpha": (r"[A-Za-z]+", str),
    "alnum": (r"[A-Za-z0-9]+", str),
    "int": (r"-?\d+", int),
    "float": (r"-?\d+(?:\.\d+)?", float),
    "bool": (r"(?i:true|false)", _to_bool),
    "uuid": (
        r"[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}",
        uuid.UUID,
    ),
}

_COMPILED: dict[str, re.Pattern[str]] = {
    name: re.compile(pattern) for name, (pattern, _) in CONVERTERS.items()
}


def segment_matches(value: str, param_type: str) -> bool:
    """Whether one path segment satisfies the *param_type* constraint.

    Empty segments never match.
    Raises ``KeyError`` if *param_type* is not a registered constraint.
    """
    return bool(value) and _COMPILED[param_type].fullmatch(value) is not None


def convert_param(value: str, param_type: str) -> str | int | float | bool | uuid.UUID:
    """Convert a captured path segment to the constraint's Python type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered constraint.
    """
    _, target = CONVERTERS[param_type]
    if not segment_matches(value, param_type):
        msg = f"{value!r} does not satisfy the {param_type!r} constraint"
        raise ValueError(msg)
    return target(value)  # type: ignore[operator]
