"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (GOCVIEW__SECTION__KEY)
3. Repo YAML (.gocview/config.yaml)
4. Global YAML (~/.config/gocview/config.yaml)
5. Built-in defaults (this file)

Examples:
    GOCVIEW__LOGGING__LEVEL=DEBUG
    GOCVIEW__RESOLVER__MAX_SEARCH_DEPTH=6
    GOCVIEW__ACQUISITION__TIMEOUT_SEC=60
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from gocview.core.excludes import SEARCH_SKIP_DIRS

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        GOCVIEW__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every skipped profile line.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ResolverConfig(BaseModel):
    """Module path resolution configuration.

    Env vars:
        GOCVIEW__RESOLVER__MODULE_FILE: Module declaration file at the workspace root
        GOCVIEW__RESOLVER__ROOT_ENV_VAR: Env var naming the external module root
        GOCVIEW__RESOLVER__MAX_SEARCH_DEPTH: Filename search depth bound
    """

    module_file: str = Field(
        default="go.mod",
        description="File declaring the workspace module ('module <name>').",
    )
    root_env_var: str = Field(
        default="GOPATH",
        description="Environment variable holding the external source root(s).",
    )
    max_search_depth: int = Field(
        default=10,
        description="Maximum directory depth for the filename search (root is 0).",
    )
    skip_dirs: frozenset[str] = Field(
        default=SEARCH_SKIP_DIRS,
        description="Directory names never descended into by the filename search.",
    )

    @field_validator("max_search_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_search_depth must be >= 0, got {v}")
        return v


class AcquisitionConfig(BaseModel):
    """Profile acquisition configuration.

    Env vars:
        GOCVIEW__ACQUISITION__GOC_BINARY: goc executable name or path
        GOCVIEW__ACQUISITION__TIMEOUT_SEC: Timeout for one 'goc profile' call
        GOCVIEW__ACQUISITION__REFRESH_DELAY_SEC: Delay before the first automatic refresh
    """

    goc_binary: str = Field(
        default="goc",
        description="goc executable used to pull profiles from the aggregation server.",
    )
    timeout_sec: float = Field(
        default=30.0,
        description="Timeout for one profile acquisition.",
    )
    refresh_delay_sec: float = Field(
        default=10.0,
        description="Delay between server detection and the first automatic refresh, "
        "giving the instrumented program time to start.",
    )

    @field_validator("timeout_sec", "refresh_delay_sec")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class GocviewConfig(BaseModel):
    """Root configuration for gocview."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    acquisition: AcquisitionConfig = Field(default_factory=AcquisitionConfig)
