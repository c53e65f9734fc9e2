"""ctxengine config command."""

from pathlib import Path

import click
import yaml

from ctxengine.config import load_settings


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file overriding the defaults.",
)
def config(config_path: Path | None) -> None:
    """Print the effective settings as YAML."""
    try:
        effective = load_settings(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot load config: {e}") from e

    data = effective.model_dump(mode="json")
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())
