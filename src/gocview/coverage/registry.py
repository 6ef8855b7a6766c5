"""Current coverage snapshot and its reconciliation with local files.

The registry holds exactly one snapshot (module path -> blocks). ``update``
and ``clear`` swap the whole mapping under a lock, so a ``query`` sees either
the old snapshot or the new one, never a mix. Readers work on the immutable
mapping they grabbed and do not hold the lock while resolving paths.

Viewers (open editors, panels) subscribe with ``register`` and are held
weakly; dropping the last reference to a viewer unsubscribes it.
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Protocol, runtime_checkable

import structlog

from gocview.coverage.models import CoverageBlock, Snapshot
from gocview.coverage.resolver import PathResolver

logger = structlog.get_logger()

_EMPTY: Mapping[str, tuple[CoverageBlock, ...]] = MappingProxyType({})


@runtime_checkable
class CoverageViewer(Protocol):
    """Something showing coverage for one local file."""

    @property
    def file_path(self) -> str: ...

    def show_coverage(self, blocks: Sequence[CoverageBlock]) -> None:
        """Replace whatever is displayed with ``blocks`` (empty = nothing to show)."""
        ...


class CoverageRegistry:
    """Owns the coverage snapshot and answers per-file queries."""

    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver
        self._lock = threading.Lock()
        self._snapshot: Mapping[str, tuple[CoverageBlock, ...]] = _EMPTY
        self._viewers: weakref.WeakSet[CoverageViewer] = weakref.WeakSet()

    @property
    def snapshot(self) -> Mapping[str, tuple[CoverageBlock, ...]]:
        """The current snapshot (read-only)."""
        with self._lock:
            return self._snapshot

    def update(self, snapshot: Snapshot) -> None:
        """Replace the entire snapshot, then refresh every registered viewer."""
        frozen = MappingProxyType({path: tuple(blocks) for path, blocks in snapshot.items()})
        with self._lock:
            self._snapshot = frozen
        logger.info("coverage_snapshot_updated", files=len(frozen))
        self.refresh_viewers()

    def clear(self) -> None:
        """Drop the snapshot; every registered viewer is told it has no blocks."""
        with self._lock:
            self._snapshot = _EMPTY
        logger.info("coverage_snapshot_cleared")
        for viewer in self._live_viewers():
            viewer.show_coverage(())

    def query(self, local_file_path: str | Path) -> tuple[CoverageBlock, ...]:
        """Blocks for a local file, or an empty tuple if nothing matches.

        Matching order:
        1. exact: the path is a snapshot key
        2. suffix: a key ends with the path, or with its file name
        3. reverse resolution: a key resolves (via the PathResolver) to the path

        Within steps 2 and 3 the first key in snapshot order wins, i.e. the
        order in which the profile first mentioned each module path.
        """
        return self._match(self.snapshot, str(local_file_path))

    def _match(
        self, snapshot: Mapping[str, tuple[CoverageBlock, ...]], path: str
    ) -> tuple[CoverageBlock, ...]:
        if not snapshot or not path:
            return ()

        if path in snapshot:
            return snapshot[path]

        file_name = path.replace("\\", "/").rsplit("/", 1)[-1]
        for module_path, blocks in snapshot.items():
            if module_path.endswith(path) or (file_name and module_path.endswith(file_name)):
                return blocks

        target = Path(path)
        for module_path, blocks in snapshot.items():
            resolved = self.resolver.resolve(module_path)
            if resolved is not None and resolved == target:
                return blocks

        return ()

    def project(self, local_file_paths: Iterable[str | Path]) -> dict[str, tuple[CoverageBlock, ...]]:
        """Query every path against one snapshot; paths with no coverage are omitted."""
        snapshot = self.snapshot
        result: dict[str, tuple[CoverageBlock, ...]] = {}
        for local in local_file_paths:
            blocks = self._match(snapshot, str(local))
            if blocks:
                result[str(local)] = blocks
        return result

    # Viewers

    def register(self, viewer: CoverageViewer) -> None:
        """Track ``viewer`` and show it the current coverage for its file."""
        with self._lock:
            self._viewers.add(viewer)
        self._refresh(viewer)

    def unregister(self, viewer: CoverageViewer) -> None:
        with self._lock:
            self._viewers.discard(viewer)

    @property
    def viewer_count(self) -> int:
        return len(self._live_viewers())

    def refresh_viewers(self) -> None:
        """Re-query the snapshot for every registered viewer."""
        for viewer in self._live_viewers():
            self._refresh(viewer)

    def _refresh(self, viewer: CoverageViewer) -> None:
        blocks = self.query(viewer.file_path)
        if blocks:
            logger.debug("coverage_applied", file_path=viewer.file_path, blocks=len(blocks))
        viewer.show_coverage(blocks)

    def _live_viewers(self) -> list[CoverageViewer]:
        with self._lock:
            return list(self._viewers)
