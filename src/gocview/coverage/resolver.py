"""Map profile module paths onto files in the local workspace.

A profile names files by module path (``example.org/proj/sub/file.go``),
which rarely matches the on-disk layout. ``PathResolver.resolve`` tries an
ordered list of strategies and stops at the first hit:

1. workspace   - strip the workspace module name (from ``go.mod``) and look
                 the remainder up under the workspace root
2. file_name   - depth-bounded search of the workspace for the last path
                 segment, pruning non-source directories
3. gopath_src  - ``<root>/src/<module path>`` for each root in $GOPATH
4. mod_cache   - ``<root>/pkg/mod/<domain>/<version dir>/<rest>`` for each
                 version directory, in sorted order

Hits are cached per module path until ``clear_cache()``. A miss returns
None and is never an error.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Mapping
from pathlib import Path

import structlog

from gocview.config.models import ResolverConfig
from gocview.core.excludes import is_skipped_dir

logger = structlog.get_logger()

MODULE_DIRECTIVE = "module"


def read_module_name(workspace_root: Path, module_file: str = "go.mod") -> str | None:
    """Return the name declared by a ``module <name>`` line, or None."""
    path = workspace_root / module_file
    if not path.is_file():
        logger.warning("module_file_missing", path=str(path))
        return None

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("module_file_unreadable", path=str(path), error=str(e))
        return None

    for line in lines:
        parts = line.split()
        if len(parts) >= 2 and parts[0] == MODULE_DIRECTIVE:
            # go.mod allows a quoted module path
            return parts[1].strip('"`')
    return None


def find_file_by_name(
    directory: Path,
    file_name: str,
    *,
    skip_dirs: frozenset[str],
    max_depth: int,
    depth: int = 0,
) -> Path | None:
    """Depth-first search for a file called ``file_name``.

    Entries are visited in sorted name order and the first match wins, so
    with several same-named files the lexicographically earliest path (in
    depth-first order) is returned. ``directory`` itself is depth 0;
    directories deeper than ``max_depth`` are not listed.
    """
    return _search_dir(directory, file_name, skip_dirs, max_depth, depth)


def _search_dir(
    directory: Path,
    file_name: str,
    skip_dirs: frozenset[str],
    max_depth: int,
    depth: int,
) -> Path | None:
    if depth > max_depth:
        return None

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        return None

    for entry in entries:
        if entry.is_file():
            if entry.name == file_name:
                return entry
        elif (
            entry.is_dir()
            and not entry.is_symlink()
            and not is_skipped_dir(entry.name, skip_dirs)
        ):
            found = _search_dir(entry, file_name, skip_dirs, max_depth, depth + 1)
            if found is not None:
                return found
    return None


class PathResolver:
    """Resolves module paths to workspace files, with a per-instance cache.

    Thread-safe: the cache and module name are guarded by one lock. File
    system probing happens outside the lock, so two threads may resolve the
    same path concurrently; both store the same answer.
    """

    def __init__(
        self,
        workspace_root: Path,
        config: ResolverConfig | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.workspace_root = workspace_root
        self.config = config or ResolverConfig()
        self._environ = environ if environ is not None else os.environ
        self._lock = threading.Lock()
        self._cache: dict[str, Path] = {}
        self._module_name = read_module_name(workspace_root, self.config.module_file)
        logger.info("workspace_module_loaded", module_name=self._module_name)

        self._strategies: tuple[tuple[str, Callable[[str], Path | None]], ...] = (
            ("workspace", self._resolve_in_workspace),
            ("file_name", self._resolve_by_file_name),
            ("gopath_src", self._resolve_in_gopath_src),
            ("mod_cache", self._resolve_in_mod_cache),
        )

    @property
    def module_name(self) -> str | None:
        with self._lock:
            return self._module_name

    def cached(self, module_path: str) -> Path | None:
        """Cached resolution for ``module_path``, without probing strategies."""
        with self._lock:
            return self._cache.get(module_path)

    def resolve(self, module_path: str) -> Path | None:
        """Return the local file for ``module_path``, or None if no strategy finds one."""
        cached = self.cached(module_path)
        if cached is not None and cached.is_file():
            return cached

        for name, strategy in self._strategies:
            resolved = strategy(module_path)
            if resolved is not None:
                with self._lock:
                    self._cache[module_path] = resolved
                logger.debug(
                    "module_path_resolved",
                    module_path=module_path,
                    strategy=name,
                    path=str(resolved),
                )
                return resolved

        logger.warning(
            "module_path_unresolved",
            module_path=module_path,
            module_name=self.module_name,
            workspace_root=str(self.workspace_root),
        )
        return None

    def clear_cache(self) -> None:
        """Drop all cached resolutions and re-read the workspace module name."""
        module_name = read_module_name(self.workspace_root, self.config.module_file)
        with self._lock:
            self._cache.clear()
            self._module_name = module_name
        logger.info("resolver_cache_cleared", module_name=module_name)

    # Strategies

    def _resolve_in_workspace(self, module_path: str) -> Path | None:
        module_name = self.module_name
        if not module_name or not module_path.startswith(module_name + "/"):
            return None
        relative = module_path[len(module_name) :].lstrip("/")
        return _existing_file(self.workspace_root / relative)

    def _resolve_by_file_name(self, module_path: str) -> Path | None:
        file_name = module_path.rsplit("/", 1)[-1]
        if not file_name:
            return None
        return find_file_by_name(
            self.workspace_root,
            file_name,
            skip_dirs=frozenset(self.config.skip_dirs),
            max_depth=self.config.max_search_depth,
        )

    def _resolve_in_gopath_src(self, module_path: str) -> Path | None:
        for root in self._external_roots():
            found = _existing_file(root / "src" / module_path)
            if found is not None:
                return found
        return None

    def _resolve_in_mod_cache(self, module_path: str) -> Path | None:
        domain, sep, rest = module_path.partition("/")
        if not sep or not rest:
            return None

        for root in self._external_roots():
            cache_dir = root / "pkg" / "mod" / domain
            try:
                version_dirs = sorted(p for p in cache_dir.iterdir() if p.is_dir())
            except OSError:
                continue
            for version_dir in version_dirs:
                found = _existing_file(version_dir / rest)
                if found is not None:
                    return found
        return None

    def _external_roots(self) -> list[Path]:
        value = self._environ.get(self.config.root_env_var, "")
        return [Path(entry) for entry in value.split(os.pathsep) if entry]


def _existing_file(path: Path) -> Path | None:
    return path if path.is_file() else None
