"""Verdict CLI entry point."""

import logging

import click


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """Verdict: declarative entity validation CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
from verdict.cli.metadata_cmd import metadata  # noqa: E402
from verdict.cli.check_cmd import check  # noqa: E402
from verdict.cli.serve_cmd import serve  # noqa: E402

cli.add_command(metadata)
cli.add_command(check)
cli.add_command(serve)
