"""Interactive mode selection.

A numbered menu is printed and one line is read: a prompt_toolkit prompt with
input validation when stdin is a TTY, a plain click prompt otherwise.
"""

import sys

import click
from prompt_toolkit import prompt
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import Validator

from . import console
from .models import MODES, Mode

MENU_MODES = (Mode.FULL, Mode.MINIMAL, Mode.FIX, Mode.UNINSTALL)
DEFAULT_MODE = Mode.FULL

_STYLE = Style.from_dict({"prompt": "ansicyan bold"})


def format_menu() -> list[str]:
    return [
        f"  {index}) {mode.value:<10} {MODES[mode].description}"
        for index, mode in enumerate(MENU_MODES, start=1)
    ]


def parse_choice(text: str) -> Mode | None:
    """Map a menu answer (number or mode name) to a Mode; empty means full."""
    answer = text.strip().lower()
    if not answer:
        return DEFAULT_MODE
    if answer.isdigit() and 1 <= int(answer) <= len(MENU_MODES):
        return MENU_MODES[int(answer) - 1]
    for mode in MENU_MODES:
        if mode.value == answer:
            return mode
    return None


def _read_choice() -> str:
    question = f"Select mode [1-{len(MENU_MODES)}, default 1]: "
    if sys.stdin.isatty():
        validator = Validator.from_callable(
            lambda text: parse_choice(text) is not None,
            error_message=f"Enter a number from 1 to {len(MENU_MODES)}",
            move_cursor_to_end=True,
        )
        return prompt([("class:prompt", question)], validator=validator, style=_STYLE)
    return click.prompt(question.rstrip(": "), default="", show_default=False)


def select_mode_interactive() -> Mode:
    click.echo("termenv installation modes:")
    for line in format_menu():
        click.echo(line)
    click.echo("")

    choice = parse_choice(_read_choice())
    if choice is None:
        console.warning(f"Invalid choice, using {DEFAULT_MODE.value}")
        return DEFAULT_MODE
    return choice


__all__ = [
    "MENU_MODES",
    "DEFAULT_MODE",
    "format_menu",
    "parse_choice",
    "select_mode_interactive",
]
