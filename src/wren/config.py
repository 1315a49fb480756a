"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, shared
read-only by every request the app serves.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, unhandled_status=200)
    """

    # Include exception text in 500 bodies
    debug: bool = False

    # Status applied when a chain continues to the end without writing
    # a response. 404 treats it like an unmatched route; 200 sends an
    # empty success.
    unhandled_status: int = 404

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Upper bound for one handler chain, in seconds (None = unbounded)
    request_timeout: float | None = None
