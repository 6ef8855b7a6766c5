"""Pull a coverage profile from a goc aggregation server.

Invokes: goc profile --center=<url>

The call blocks for up to ``timeout_sec`` and must not run on a thread that
handles user interaction. Every outcome is returned as a ``FetchResult``:

- ``ProfileFetched``: raw profile text
- ``NoProfiles``: the server is up but has not recorded any coverage yet;
  the user should exercise the program and retry
- ``FetchFailed``: anything else (non-zero exit, timeout, missing binary)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

import structlog

from gocview.config.models import AcquisitionConfig

logger = structlog.get_logger()

NO_PROFILES_MARKER = "no profiles"

NO_PROFILES_GUIDANCE = (
    "The goc server has not collected any coverage yet. "
    "Exercise the running program (call an endpoint, run a command), then refresh."
)


@dataclass(frozen=True, slots=True)
class ProfileFetched:
    raw_text: str


@dataclass(frozen=True, slots=True)
class NoProfiles:
    message: str = NO_PROFILES_GUIDANCE


@dataclass(frozen=True, slots=True)
class FetchFailed:
    message: str
    exit_code: int | None = None


FetchResult = ProfileFetched | NoProfiles | FetchFailed


def build_profile_command(center_url: str, goc_binary: str = "goc") -> list[str]:
    return [goc_binary, "profile", f"--center={center_url}"]


def fetch_profile(
    center_url: str,
    *,
    workdir: Path | None = None,
    config: AcquisitionConfig | None = None,
) -> FetchResult:
    """Run ``goc profile`` against ``center_url`` and classify the outcome."""
    config = config or AcquisitionConfig()
    cmd = build_profile_command(center_url, config.goc_binary)
    logger.info("profile_fetch_started", center_url=center_url)

    try:
        result = subprocess.run(
            cmd,
            cwd=workdir,
            capture_output=True,
            text=True,
            timeout=config.timeout_sec,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("profile_fetch_timeout", center_url=center_url, timeout=config.timeout_sec)
        return FetchFailed(f"goc profile timed out after {config.timeout_sec:g}s")
    except FileNotFoundError:
        logger.warning("goc_binary_missing", goc_binary=config.goc_binary)
        return FetchFailed(f"goc executable not found: {config.goc_binary}")
    except OSError as e:
        logger.warning("profile_fetch_os_error", error=str(e))
        return FetchFailed(f"failed to run goc: {e}")

    if result.returncode != 0:
        stderr = result.stderr.strip()
        if NO_PROFILES_MARKER in stderr.lower():
            logger.info("profile_fetch_empty", center_url=center_url)
            return NoProfiles()
        logger.warning(
            "profile_fetch_failed",
            center_url=center_url,
            exit_code=result.returncode,
            stderr=stderr,
        )
        return FetchFailed(f"goc profile failed: {stderr}", exit_code=result.returncode)

    logger.info("profile_fetch_succeeded", center_url=center_url, bytes=len(result.stdout))
    return ProfileFetched(result.stdout)
