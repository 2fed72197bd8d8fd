"""Leveled, one-line user output and logging setup."""

import logging

import click

_LEVELS = {
    "info": ("•", "blue"),
    "success": ("✓", "green"),
    "warning": ("!", "yellow"),
    "error": ("✗", "red"),
}


def setup_logging(debug: bool = False) -> None:
    """Configure root logging; DEBUG when --debug is given, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        force=True,
    )


def emit(level: str, message: str) -> None:
    icon, color = _LEVELS[level]
    click.secho(f"{icon} {message}", fg=color)


def info(message: str) -> None:
    emit("info", message)


def success(message: str) -> None:
    emit("success", message)


def warning(message: str) -> None:
    emit("warning", message)


def error(message: str) -> None:
    emit("error", message)


def header(text: str) -> None:
    click.echo("")
    click.secho("=" * 70, fg="blue")
    click.secho(f"  {text}", fg="blue")
    click.secho("=" * 70, fg="blue")
