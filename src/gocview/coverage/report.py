"""Structured coverage summaries.

Output schema for build_summary:
{
    "summary": {
        "total_files": int,
        "fully_covered_files": int,
        "total_blocks": int,
        "covered_blocks": int,
        "total_statements": int,
        "covered_statements": int,
        "coverage_percent": float
    },
    "files": [
        {
            "module_path": str,
            "coverage_percent": float,
            "covered_statements": int,
            "total_statements": int,
            "total_executions": int,
            "blocks": int,
            "first_uncovered": [line, col] | null
        },
        ...
    ]
}
"""

from collections.abc import Iterable
from typing import Any

from gocview.coverage.models import CoverageSummary, FileCoverage, rank_by_coverage


def compute_file_stats(files: Iterable[FileCoverage]) -> list[dict[str, Any]]:
    """Per-file statistics, highest coverage first."""
    file_stats = []

    for fc in rank_by_coverage(files):
        uncovered = fc.uncovered_blocks
        first_uncovered = (
            [uncovered[0].start_line, uncovered[0].start_col] if uncovered else None
        )
        file_stats.append(
            {
                "module_path": fc.module_path,
                "coverage_percent": round(fc.coverage_percentage, 2),
                "covered_statements": fc.covered_statements,
                "total_statements": fc.total_statements,
                "total_executions": fc.total_executions,
                "blocks": fc.block_count,
                "first_uncovered": first_uncovered,
            }
        )

    return file_stats


def build_summary(
    files: Iterable[FileCoverage],
    *,
    include_files: bool = True,
    max_files: int | None = None,
) -> dict[str, Any]:
    """Build a structured coverage summary.

    Args:
        files: Grouped coverage, one entry per module path.
        include_files: Whether to include per-file details.
        max_files: Limit number of files listed. None = all.

    Returns:
        Structured dict suitable for JSON serialization.
    """
    files = list(files)
    summary = CoverageSummary.from_files(files)

    result: dict[str, Any] = {
        "summary": {
            "total_files": summary.total_files,
            "fully_covered_files": summary.fully_covered_files,
            "total_blocks": summary.total_blocks,
            "covered_blocks": summary.covered_blocks,
            "total_statements": summary.total_statements,
            "covered_statements": summary.covered_statements,
            "coverage_percent": round(summary.coverage_percentage, 2),
        },
    }

    if include_files:
        file_stats = compute_file_stats(files)
        if max_files is not None:
            file_stats = file_stats[:max_files]
        result["files"] = file_stats

    return result


def build_text_summary(files: Iterable[FileCoverage]) -> str:
    """One-line human-readable summary."""
    summary = CoverageSummary.from_files(files)
    if summary.total_statements == 0:
        return "No coverage data"

    return (
        f"Coverage: {summary.coverage_percentage:.1f}% "
        f"({summary.covered_statements}/{summary.total_statements} statements, "
        f"{summary.total_files} files)"
    )
