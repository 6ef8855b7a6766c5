"""gocview fetch command - pull and summarize coverage from a goc server."""

import json
from pathlib import Path

import click
from rich.console import Console

from gocview.acquisition import FetchFailed, NoProfiles, fetch_profile
from gocview.cli.render import print_coverage
from gocview.cli.utils import find_workspace_root, load_workspace_config
from gocview.coverage import build_summary, group_by_file, parse_profile_detailed

NO_PROFILES_EXIT_CODE = 2


@click.command()
@click.option("--center", "center_url", required=True, help="goc server URL")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: nearest directory with go.mod)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the raw profile to this file",
)
def fetch_command(
    center_url: str, root: Path | None, as_json: bool, output_path: Path | None
) -> None:
    """Fetch the current profile from a goc server and summarize it.

    Exits with status 2 when the server has not recorded any coverage yet.
    """
    workspace_root = root.resolve() if root else find_workspace_root()
    config = load_workspace_config(workspace_root)

    result = fetch_profile(center_url, workdir=workspace_root, config=config.acquisition)

    if isinstance(result, NoProfiles):
        click.echo(result.message, err=True)
        raise SystemExit(NO_PROFILES_EXIT_CODE)
    if isinstance(result, FetchFailed):
        raise click.ClickException(result.message)

    if output_path is not None:
        output_path.write_text(result.raw_text)

    parsed = parse_profile_detailed(result.raw_text)
    files = group_by_file(parsed.blocks)

    if as_json:
        click.echo(json.dumps(build_summary(files), indent=2))
        return

    print_coverage(Console(), files, skipped_lines=len(parsed.skipped))
