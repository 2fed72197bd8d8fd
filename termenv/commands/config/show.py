"""Show settings command implementation."""

import sys
from dataclasses import asdict

import click
import yaml

from termenv.commands.utils import load_context
from termenv.config import load_settings
from termenv.errors import ConfigError, format_error
from termenv.paths import get_config_path


@click.command(name="show")
@click.pass_context
def config_show(ctx):
    """Print the settings file location and the effective values."""
    config_path = get_config_path()
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    env = load_context()
    source = config_path if config_path.exists() else f"{config_path} (not present, defaults)"
    click.echo(f"# settings: {source}")
    click.echo(yaml.safe_dump(asdict(settings), sort_keys=False).rstrip())
    click.echo("# effective paths")
    click.echo(
        yaml.safe_dump(
            {
                "home": str(env.home),
                "notes_dir": str(env.notes_dir),
                "backup_dir": str(env.backup_parent),
                "version_file": str(env.version_file),
            },
            sort_keys=False,
        ).rstrip()
    )
