"""Core module exports."""

from gocview.core.errors import (
    ConfigError,
    ErrorCode,
    GocviewError,
    InternalError,
    ProfileError,
)
from gocview.core.logging import (
    clear_cycle_id,
    configure_logging,
    get_cycle_id,
    set_cycle_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "GocviewError",
    "InternalError",
    "ProfileError",
    # Logging
    "clear_cycle_id",
    "configure_logging",
    "get_cycle_id",
    "set_cycle_id",
]
