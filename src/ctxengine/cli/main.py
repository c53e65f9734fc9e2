"""ctxengine CLI main entry point."""

import click

from ctxengine import __version__


@click.group()
@click.version_option(version=__version__, prog_name="ctxengine")
def cli() -> None:
    """ctxengine - ranked code context for assistant prompts."""
    pass


# Import and register subcommands
from ctxengine.cli.config_cmd import config  # noqa: E402
from ctxengine.cli.query import query  # noqa: E402

cli.add_command(query)
cli.add_command(config)
