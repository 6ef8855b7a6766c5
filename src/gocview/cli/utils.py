"""CLI utilities."""

from pathlib import Path

import click

from gocview.config import GocviewConfig, load_config
from gocview.core.errors import ConfigError


def find_workspace_root(start_path: Path | None = None, module_file: str = "go.mod") -> Path:
    """Find the nearest directory at or above start_path holding a module file.

    A workspace without a module file is still usable (only the
    workspace-relative resolution strategy is lost), so when none is found
    the start directory itself is returned.
    """
    if start_path is None:
        start_path = Path.cwd()

    start = start_path.resolve()
    current = start

    while current != current.parent:
        if (current / module_file).is_file():
            return current
        current = current.parent

    if (current / module_file).is_file():
        return current
    return start


def load_workspace_config(root: Path) -> GocviewConfig:
    """Load config for a workspace, converting config errors to CLI errors."""
    try:
        return load_config(root)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
