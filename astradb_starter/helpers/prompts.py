"""Interactive prompt sources.

Workflows ask questions through a ``Prompter`` so tests can script the
answers. ``ClickPrompter`` is the terminal implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import click


class Prompter(Protocol):
    """Source of interactive answers."""

    def text(self, message: str, default: str | None = None) -> str:
        """Ask for free text."""
        ...

    def password(self, message: str) -> str:
        """Ask for a secret; input is not echoed."""
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""
        ...

    def select(self, message: str, choices: Sequence[str]) -> str:
        """Ask the user to pick one of ``choices``."""
        ...

    def existing_file(self, message: str, default: Path | None = None) -> Path:
        """Ask for the path of a file that exists, re-asking until it does."""
        ...


class ClickPrompter:
    """Prompter backed by ``click.prompt`` / ``click.confirm``."""

    def text(self, message: str, default: str | None = None) -> str:
        value: str = click.prompt(message, default=default, type=str)
        return value.strip()

    def password(self, message: str) -> str:
        value: str = click.prompt(
            message,
            hide_input=True,
            default="",
            show_default=False,
            type=str,
        )
        return value.strip()

    def confirm(self, message: str, default: bool = True) -> bool:
        return click.confirm(message, default=default)

    def select(self, message: str, choices: Sequence[str]) -> str:
        for index, choice in enumerate(choices, 1):
            click.echo(f"  {index}. {choice}")
        answer: str = click.prompt(
            message,
            type=click.Choice([*choices, *(str(i) for i in range(1, len(choices) + 1))]),
            show_choices=False,
        )
        if answer.isdigit():
            return choices[int(answer) - 1]
        return answer

    def existing_file(self, message: str, default: Path | None = None) -> Path:
        value: str = click.prompt(
            message,
            default=str(default) if default is not None else None,
            type=click.Path(exists=True, dir_okay=False, resolve_path=True),
        )
        return Path(value)
