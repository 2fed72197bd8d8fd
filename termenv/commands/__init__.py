"""CLI command definitions for termenv."""

import sys

import click

from termenv import __version__, console
from termenv.commands.config import config
from termenv.commands.restore import restore
from termenv.commands.status import status
from termenv.commands.utils import exit_code, load_context, print_summary
from termenv.console import setup_logging
from termenv.controller import ModeController
from termenv.models import Mode
from termenv.registry import default_registry
from termenv.tui import MENU_MODES, select_mode_interactive


def _list_components() -> None:
    for component in default_registry():
        requires = ", ".join(p.value for p in component.prerequisites) or "-"
        click.echo(f"{component.name:<12} {component.description} (requires: {requires})")


@click.group(invoke_without_command=True)
@click.option(
    "--mode",
    "-m",
    type=click.Choice([mode.value for mode in MENU_MODES]),
    help="Operating mode; without it a menu is shown",
)
@click.option(
    "--component",
    "-c",
    "components",
    multiple=True,
    metavar="NAME",
    help="Limit the run to a component (repeatable); prerequisites are added",
)
@click.option(
    "--full-uninstall",
    is_flag=True,
    help="With --mode uninstall, also remove tools and plugin clones",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every confirmation")
@click.option("--list", "list_components", is_flag=True, help="List components and exit")
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.version_option(__version__, prog_name="termenv")
@click.pass_context
def cli(ctx, mode, components, full_uninstall, assume_yes, list_components, debug):
    """Install, update, repair or remove the termenv workstation setup."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    setup_logging(debug)

    if ctx.invoked_subcommand is not None:
        return
    if list_components:
        _list_components()
        return
    if full_uninstall and mode != Mode.UNINSTALL.value:
        raise click.UsageError("--full-uninstall requires --mode uninstall")

    env = load_context()
    if mode:
        selected = Mode(mode)
    elif components:
        selected = Mode.COMPONENT
    else:
        selected = select_mode_interactive()

    console.info(f"termenv {__version__}: {selected.value} mode")
    report = ModeController(env).run(
        selected,
        components,
        full_uninstall=full_uninstall,
        assume_yes=assume_yes,
    )
    print_summary(report)

    code = exit_code(report)
    if code:
        sys.exit(code)


cli.add_command(status)
cli.add_command(restore)
cli.add_command(config)

__all__ = ["cli"]


if __name__ == "__main__":
    cli()
