"""Directories skipped by the workspace filename search.

The search looks for a source file by name, so any directory that only
holds VCS metadata, third-party copies, build output, or IDE state is
pruned. ``ResolverConfig.skip_dirs`` defaults to ``SEARCH_SKIP_DIRS`` and
may replace it entirely.
"""

from __future__ import annotations

# VCS internals
VCS_DIRS: frozenset[str] = frozenset((".git", ".svn", ".hg", ".bzr"))

# Vendored dependencies
DEPENDENCY_DIRS: frozenset[str] = frozenset(("vendor", "node_modules"))

# Build outputs
BUILD_DIRS: frozenset[str] = frozenset(("build", "target", ".gradle"))

# IDE/Editor state
IDE_DIRS: frozenset[str] = frozenset((".idea", ".vscode"))

SEARCH_SKIP_DIRS: frozenset[str] = VCS_DIRS | DEPENDENCY_DIRS | BUILD_DIRS | IDE_DIRS


def is_skipped_dir(dirname: str, skip_dirs: frozenset[str] = SEARCH_SKIP_DIRS) -> bool:
    return dirname in skip_dirs
