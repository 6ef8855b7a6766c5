"""Config module exports."""

from gocview.config.loader import load_config
from gocview.config.models import (
    AcquisitionConfig,
    GocviewConfig,
    LoggingConfig,
    LogOutputConfig,
    ResolverConfig,
)

__all__ = [
    "load_config",
    "AcquisitionConfig",
    "GocviewConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ResolverConfig",
]
