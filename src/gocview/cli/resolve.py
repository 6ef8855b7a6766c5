"""gocview resolve command - map a module path to a workspace file."""

from pathlib import Path

import click

from gocview.cli.utils import find_workspace_root, load_workspace_config
from gocview.coverage import PathResolver


@click.command()
@click.argument("module_path")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: nearest directory with go.mod)",
)
def resolve_command(module_path: str, root: Path | None) -> None:
    """Print the local file MODULE_PATH refers to.

    Exits with status 1 if no resolution strategy finds the file.
    """
    workspace_root = root.resolve() if root else find_workspace_root()
    config = load_workspace_config(workspace_root)
    resolver = PathResolver(workspace_root, config.resolver)

    resolved = resolver.resolve(module_path)
    if resolved is None:
        click.echo(f"Not found: {module_path}", err=True)
        raise SystemExit(1)
    click.echo(str(resolved))
