"""Coverage session for one workspace.

Ties the pieces together the way an editor integration drives them:

- process output is scanned for the goc server announcement; the last
  detected URL is remembered
- a refresh cycle (fetch -> parse -> group -> registry.update) runs on a
  single background worker; a second refresh while one is in flight is
  rejected as BUSY rather than queued
- when the instrumented process exits, coverage is cleared
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from gocview.acquisition import FetchFailed, FetchResult, NoProfiles, fetch_profile
from gocview.config.models import GocviewConfig
from gocview.core.errors import InternalError
from gocview.core.logging import clear_cycle_id, set_cycle_id
from gocview.coverage.models import FileCoverage, group_by_file, rank_by_coverage, to_snapshot
from gocview.coverage.parser import extract_server_url, parse_profile_detailed
from gocview.coverage.registry import CoverageRegistry
from gocview.coverage.resolver import PathResolver

logger = structlog.get_logger()

Fetcher = Callable[[str], FetchResult]


class RefreshStatus(Enum):
    """Outcome of one refresh cycle."""

    UPDATED = "updated"
    NO_PROFILES = "no_profiles"
    FAILED = "failed"
    BUSY = "busy"
    NO_SERVER = "no_server"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RefreshOutcome:
    status: RefreshStatus
    message: str = ""
    files: tuple[FileCoverage, ...] = ()  # ranked by coverage, highest first
    skipped_lines: int = 0

    @property
    def ok(self) -> bool:
        return self.status is RefreshStatus.UPDATED


@dataclass
class CoverageSession:
    """
    Coverage state for one workspace plus the refresh machinery.

    Design:
    - PathResolver and CoverageRegistry are owned here and handed to viewers
    - Refreshes run on a single-worker ThreadPoolExecutor
    - ``_cycle_lock`` is acquired non-blocking, so at most one cycle is in flight
    """

    workspace_root: Path
    config: GocviewConfig = field(default_factory=GocviewConfig)
    fetcher: Fetcher | None = None  # None runs `goc profile` in the workspace

    resolver: PathResolver = field(init=False)
    registry: CoverageRegistry = field(init=False)
    _server_url: str | None = field(default=None, init=False)
    _state_lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _cycle_lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _closed: threading.Event = field(default_factory=threading.Event, init=False)
    _executor: ThreadPoolExecutor | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.resolver = PathResolver(self.workspace_root, self.config.resolver)
        self.registry = CoverageRegistry(self.resolver)

    @property
    def server_url(self) -> str | None:
        with self._state_lock:
            return self._server_url

    def _fetch_with_goc(self, center_url: str) -> FetchResult:
        return fetch_profile(
            center_url,
            workdir=self.workspace_root,
            config=self.config.acquisition,
        )

    # Process events

    def on_process_output(self, text: str, *, auto_refresh: bool = False) -> str | None:
        """Scan a chunk of process output; remember and return a detected server URL."""
        url = extract_server_url(text)
        if url is None:
            return None

        with self._state_lock:
            self._server_url = url
        logger.info("goc_server_detected", server_url=url)

        if auto_refresh:
            self.refresh_in_background(delay_sec=self.config.acquisition.refresh_delay_sec)
        return url

    def on_process_terminated(self) -> None:
        """Forget the server and clear coverage, if a server had been detected."""
        with self._state_lock:
            detected = self._server_url is not None
            self._server_url = None
        if detected:
            self.registry.clear()
            logger.info("coverage_cleared_on_exit")

    # Refresh

    def refresh(self) -> RefreshOutcome:
        """Run one fetch/parse/update cycle on the calling thread."""
        url = self.server_url
        if url is None:
            return RefreshOutcome(RefreshStatus.NO_SERVER, "No goc server detected")

        if not self._cycle_lock.acquire(blocking=False):
            return RefreshOutcome(RefreshStatus.BUSY, "A refresh is already in progress")

        set_cycle_id()
        try:
            return self._run_cycle(url)
        except Exception as e:
            error = InternalError.unexpected(str(e), server_url=url)
            logger.exception("refresh_failed", error=str(error))
            return RefreshOutcome(RefreshStatus.FAILED, error.message)
        finally:
            clear_cycle_id()
            self._cycle_lock.release()

    def _run_cycle(self, url: str) -> RefreshOutcome:
        fetcher = self.fetcher or self._fetch_with_goc
        result = fetcher(url)

        if isinstance(result, NoProfiles):
            return RefreshOutcome(RefreshStatus.NO_PROFILES, result.message)
        if isinstance(result, FetchFailed):
            return RefreshOutcome(RefreshStatus.FAILED, result.message)

        parsed = parse_profile_detailed(result.raw_text)
        files = group_by_file(parsed.blocks)
        self.registry.update(to_snapshot(files))

        logger.info(
            "refresh_completed",
            files=len(files),
            blocks=len(parsed.blocks),
            skipped=len(parsed.skipped),
        )
        return RefreshOutcome(
            RefreshStatus.UPDATED,
            f"Coverage updated ({len(files)} files)",
            files=tuple(rank_by_coverage(files)),
            skipped_lines=len(parsed.skipped),
        )

    def refresh_in_background(self, delay_sec: float = 0.0) -> Future[RefreshOutcome]:
        """Submit a refresh to the worker thread, optionally after a delay.

        Once the session is closed no worker is started; the returned future is
        already resolved with a CANCELLED outcome.
        """
        with self._state_lock:
            if not self._closed.is_set():
                return self._get_executor().submit(self._delayed_refresh, delay_sec)

        future: Future[RefreshOutcome] = Future()
        future.set_result(RefreshOutcome(RefreshStatus.CANCELLED, "Session closed"))
        return future

    def _delayed_refresh(self, delay_sec: float) -> RefreshOutcome:
        if delay_sec > 0 and self._closed.wait(delay_sec):
            return RefreshOutcome(RefreshStatus.CANCELLED, "Session closed")
        if self._closed.is_set():
            return RefreshOutcome(RefreshStatus.CANCELLED, "Session closed")
        return self.refresh()

    def _get_executor(self) -> ThreadPoolExecutor:
        # caller holds _state_lock
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix="gocview-refresh",
            )
        return self._executor

    def close(self) -> None:
        """Cancel pending delayed refreshes and stop the worker."""
        self._closed.set()
        with self._state_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)
        logger.info("coverage_session_closed")
