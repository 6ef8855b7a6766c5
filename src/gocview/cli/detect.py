"""gocview detect command - find the goc server address in process output."""

from typing import TextIO

import click

from gocview.coverage import extract_server_url


@click.command()
@click.argument("source", type=click.File("r"), default="-")
def detect_command(source: TextIO) -> None:
    """Scan SOURCE (default: stdin) for a goc server announcement.

    Prints the server URL and exits 0, or exits 1 if none is found.
    """
    for line in source:
        url = extract_server_url(line)
        if url is not None:
            click.echo(url)
            return
    click.echo("No goc server announcement found", err=True)
    raise SystemExit(1)
