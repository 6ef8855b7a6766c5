"""gocview CLI - gocview command."""

import click

from gocview.cli.detect import detect_command
from gocview.cli.fetch import fetch_command
from gocview.cli.parse import parse_command
from gocview.cli.query import query_command
from gocview.cli.resolve import resolve_command
from gocview.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="gocview")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """gocview - goc coverage profiles mapped onto your Go workspace."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "ERROR")


cli.add_command(parse_command, name="parse")
cli.add_command(resolve_command, name="resolve")
cli.add_command(query_command, name="query")
cli.add_command(detect_command, name="detect")
cli.add_command(fetch_command, name="fetch")


if __name__ == "__main__":
    cli()
