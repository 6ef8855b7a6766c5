"""Coverage profile ingestion and reconciliation.

This package provides:
- Profile parsing (goc / go cover text format) and server address detection
- Module path -> local file resolution
- A thread-safe coverage snapshot queryable per local file

Usage:
    from gocview.coverage import (
        CoverageRegistry, PathResolver, group_by_file, parse_profile, to_snapshot,
    )

    blocks = parse_profile(raw_text)
    files = group_by_file(blocks)

    registry = CoverageRegistry(PathResolver(workspace_root))
    registry.update(to_snapshot(files))
    registry.query("/work/proj/handler.go")
"""

from gocview.coverage.models import (
    CoverageBlock,
    CoverageSummary,
    FileCoverage,
    Snapshot,
    group_by_file,
    navigation_target,
    rank_by_coverage,
    to_snapshot,
)
from gocview.coverage.parser import (
    ProfileParseResult,
    SkippedLine,
    extract_server_url,
    load_profile,
    parse_profile,
    parse_profile_detailed,
)
from gocview.coverage.registry import CoverageRegistry, CoverageViewer
from gocview.coverage.report import build_summary, build_text_summary, compute_file_stats
from gocview.coverage.resolver import PathResolver, find_file_by_name, read_module_name

__all__ = [
    # Models
    "CoverageBlock",
    "CoverageSummary",
    "FileCoverage",
    "Snapshot",
    "group_by_file",
    "navigation_target",
    "rank_by_coverage",
    "to_snapshot",
    # Parser
    "ProfileParseResult",
    "SkippedLine",
    "extract_server_url",
    "load_profile",
    "parse_profile",
    "parse_profile_detailed",
    # Resolution
    "PathResolver",
    "find_file_by_name",
    "read_module_name",
    # Registry
    "CoverageRegistry",
    "CoverageViewer",
    # Report
    "build_summary",
    "build_text_summary",
    "compute_file_stats",
]
