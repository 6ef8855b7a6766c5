"""gocview parse command - summarize a coverage profile file."""

import json
from pathlib import Path

import click
from rich.console import Console

from gocview.cli.render import print_coverage
from gocview.core.errors import ProfileError
from gocview.coverage import build_summary, group_by_file, load_profile


@click.command()
@click.argument("profile", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N files")
def parse_command(profile: Path, as_json: bool, limit: int | None) -> None:
    """Parse PROFILE and show per-file statement coverage."""
    try:
        parsed = load_profile(profile)
    except ProfileError as e:
        raise click.ClickException(e.message) from e

    files = group_by_file(parsed.blocks)

    if as_json:
        result = build_summary(files, max_files=limit)
        result["skipped_lines"] = [
            {"line_number": s.line_number, "text": s.text, "reason": s.reason}
            for s in parsed.skipped
        ]
        click.echo(json.dumps(result, indent=2))
        return

    print_coverage(Console(), files, limit=limit, skipped_lines=len(parsed.skipped))
