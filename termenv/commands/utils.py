"""Shared helpers for commands."""

import sys

import click

from termenv import console
from termenv.config import load_settings
from termenv.errors import ConfigError, format_error
from termenv.execution import run_command
from termenv.models import RunReport
from termenv.paths import EnvContext, build_context, get_config_path


def load_context() -> EnvContext:
    """Build the run context from the settings file and environment.

    Exits with status 1 if the settings file is invalid.
    """
    try:
        settings = load_settings(get_config_path())
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    return build_context(settings, runner=run_command)


def exit_code(report: RunReport) -> int:
    if report.aborted or report.failed_probes:
        return 1
    return 0


def print_summary(report: RunReport) -> None:
    console.header(f"Summary ({report.mode})")
    if report.components:
        click.echo(f"Components: {', '.join(report.components)}")
    click.echo(f"Changes: {len(report.changes)}")
    if report.commands:
        click.echo(f"Commands run: {len(report.commands)}")
    if report.warnings:
        console.warning(f"{len(report.warnings)} warning(s)")

    if report.cancelled:
        console.info("Nothing was changed")
    elif report.aborted:
        console.error("Run aborted; the remaining steps were not applied")
    elif report.failed_probes:
        console.error(f"Verification failed for {len(report.failed_probes)} check(s):")
        for result in report.failed_probes:
            click.echo(f"    {result.target}: {result.diagnostic}")
    elif report.errors:
        console.warning("Completed with errors")
    else:
        console.success("All checks passed")

    if report.version_recorded:
        console.success("Installation recorded")
    if report.backup_dir is not None:
        if report.aborted or report.failed_probes:
            console.info(f"Backups of the previous state: {report.backup_dir}")
            console.info(f"Restore them with: termenv restore {report.backup_dir}")
        else:
            console.info(f"Backups: {report.backup_dir}")
