"""Rich rendering helpers shared by commands."""

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from gocview.coverage import FileCoverage, build_text_summary, rank_by_coverage


def _percent_style(percent: float) -> str:
    if percent >= 80.0:
        return "green"
    if percent >= 50.0:
        return "yellow"
    return "red"


def make_coverage_table(files: Sequence[FileCoverage], limit: int | None = None) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1), pad_edge=False)
    table.add_column("File", overflow="fold")
    table.add_column("Coverage", justify="right")
    table.add_column("Covered", justify="right")
    table.add_column("Statements", justify="right")
    table.add_column("Executions", justify="right")

    ranked = rank_by_coverage(files)
    if limit is not None:
        ranked = ranked[:limit]

    for fc in ranked:
        percent = fc.coverage_percentage
        table.add_row(
            fc.module_path,
            f"[{_percent_style(percent)}]{percent:.2f}%[/]",
            str(fc.covered_statements),
            str(fc.total_statements),
            str(fc.total_executions),
        )
    return table


def print_coverage(
    console: Console,
    files: Sequence[FileCoverage],
    *,
    limit: int | None = None,
    skipped_lines: int = 0,
) -> None:
    if files:
        console.print(make_coverage_table(files, limit))
        console.print()
    console.print(build_text_summary(files))
    if skipped_lines:
        console.print(f"[dim]Skipped {skipped_lines} malformed line(s)[/dim]")
