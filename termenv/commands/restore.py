"""Restore command implementation."""

import sys
from pathlib import Path

import click

from termenv import console
from termenv.backup import BackupManager, read_manifest, restore as restore_run
from termenv.commands.utils import load_context
from termenv.errors import EngineError, format_error


@click.command()
@click.argument(
    "backup_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def restore(ctx, backup_dir: Path, assume_yes: bool):
    """Copy every path saved in BACKUP_DIR back into place.

    The current state of each restored path is backed up first, so a
    restore can itself be restored.
    """
    env = load_context()
    try:
        records = read_manifest(backup_dir)
    except EngineError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    for record in records:
        click.echo(f"  {record.source}")
    if not assume_yes and not click.confirm(f"Restore {len(records)} path(s)?", default=False):
        console.info("Restore cancelled")
        return

    backups = BackupManager.for_run(env.backup_parent, env.started, env.home)
    try:
        restored = restore_run(backup_dir, backups)
    except EngineError as e:
        click.echo(format_error(str(e)), err=True)
        _save_manifest(backups)
        sys.exit(1)
    saved = _save_manifest(backups)

    for path in restored:
        console.success(f"Restored {path}")
    if not saved:
        sys.exit(1)
    if backups.used:
        console.info(f"Previous state saved in {backups.root}")


def _save_manifest(backups: BackupManager) -> bool:
    try:
        backups.write_manifest()
    except EngineError as e:
        click.echo(format_error(str(e)), err=True)
        return False
    return True
