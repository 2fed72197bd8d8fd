"""Initialize settings command implementation."""

import sys

import click

from termenv.config import write_default_settings
from termenv.paths import get_config_path


@click.command(name="init")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite an existing settings file (creates backup first)",
)
@click.pass_context
def config_init(ctx, force: bool):
    """Write a commented settings file with the defaults."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        click.echo(f"Settings file already exists: {config_path}")
        click.echo("Use --force to re-initialize (creates backup first).")
        sys.exit(1)

    if config_path.exists():
        backup_path = config_path.with_suffix(".yaml.bak")
        click.echo(f"Backing up existing settings to {backup_path}...")
        config_path.replace(backup_path)

    try:
        write_default_settings(config_path)
    except OSError as e:
        click.echo(f"Error: could not write {config_path}: {e}", err=True)
        sys.exit(1)
    click.echo(f"✅ Settings written to {config_path}")
