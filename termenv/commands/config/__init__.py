"""Settings file commands."""

import click

from termenv.commands.config.init import config_init
from termenv.commands.config.show import config_show


@click.group()
def config():
    """Settings file commands."""
    pass


config.add_command(config_init, name="init")
config.add_command(config_show, name="show")
