"""Status command implementation."""

import click

from termenv import __version__, console
from termenv.commands.utils import load_context
from termenv.registry import default_registry
from termenv.versions import VersionTracker, is_outdated


@click.command()
@click.option("--verbose", "-v", is_flag=True, help="List every check, not only failures")
@click.pass_context
def status(ctx, verbose: bool):
    """Show the recorded installation and per-component health."""
    env = load_context()
    record = VersionTracker(env.version_file).read()

    if record is None:
        console.warning("No successful installation recorded")
    else:
        click.echo(f"Installed: {record.version} ({record.mode}) at {record.timestamp}")
        if is_outdated(record, __version__):
            console.warning(f"termenv {__version__} is newer; run 'termenv --mode minimal'")

    for component in default_registry():
        results = component.expected(env)
        missing = [result for result in results if not result.present]
        line = f"{component.name:<12} {len(results) - len(missing)}/{len(results)} checks"
        if missing:
            console.error(line)
        else:
            console.success(line)
        for result in results if verbose else missing:
            mark = "✓" if result.present else "✗"
            click.echo(f"    {mark} {result.target}: {result.diagnostic}")
