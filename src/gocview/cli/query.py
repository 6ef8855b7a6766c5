"""gocview query command - show which profile blocks apply to local files."""

import json
from pathlib import Path

import click

from gocview.cli.utils import find_workspace_root, load_workspace_config
from gocview.core.errors import ProfileError
from gocview.coverage import (
    CoverageRegistry,
    PathResolver,
    group_by_file,
    load_profile,
    to_snapshot,
)


@click.command()
@click.argument("profile", type=click.Path(path_type=Path))
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: nearest directory with go.mod)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def query_command(profile: Path, files: tuple[Path, ...], root: Path | None, as_json: bool) -> None:
    """Load PROFILE and report the coverage blocks matching each of FILES."""
    workspace_root = root.resolve() if root else find_workspace_root()
    config = load_workspace_config(workspace_root)

    try:
        parsed = load_profile(profile)
    except ProfileError as e:
        raise click.ClickException(e.message) from e

    registry = CoverageRegistry(PathResolver(workspace_root, config.resolver))
    registry.update(to_snapshot(group_by_file(parsed.blocks)))

    local_paths = [str(f.resolve()) for f in files]
    projected = registry.project(local_paths)

    if as_json:
        click.echo(
            json.dumps(
                {
                    path: [
                        {
                            "start": [b.start_line, b.start_col],
                            "end": [b.end_line, b.end_col],
                            "statements": b.num_statements,
                            "count": b.execution_count,
                        }
                        for b in projected.get(path, ())
                    ]
                    for path in local_paths
                },
                indent=2,
            )
        )
        return

    for path in local_paths:
        blocks = projected.get(path, ())
        if not blocks:
            click.echo(f"{path}: no coverage")
            continue
        covered = sum(1 for b in blocks if b.is_covered)
        click.echo(f"{path}: {len(blocks)} blocks, {covered} covered")
