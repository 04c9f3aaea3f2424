"""
Interactive confirmation.

Stores never read stdin themselves; they receive a ``Confirmer`` so that
tests can answer prompts with a fixed value.
"""

import sys
from typing import Iterable, List, Optional, Protocol, Union

from rich.console import Console
from rich.prompt import Confirm


class Confirmer(Protocol):
    """Yes/no confirmation capability."""

    def confirm(self, message: str) -> bool:
        ...


def is_interactive() -> bool:
    """Whether stdin is attached to a terminal."""
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


class RichConfirmer:
    """Asks on the terminal, answering "no" when not interactive."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def confirm(self, message: str) -> bool:
        if not is_interactive():
            return False
        try:
            return Confirm.ask(message, console=self.console, default=False)
        except (EOFError, KeyboardInterrupt):
            return False


class StaticConfirmer:
    """
    Answers prompts from a fixed script and records what it was asked.

    Args:
        answers: A single answer for every prompt, or a sequence of
            answers consumed in order (the last one repeats)
    """

    def __init__(self, answers: Union[bool, Iterable[bool]] = False):
        if isinstance(answers, bool):
            self._answers = [answers]
        else:
            self._answers = list(answers) or [False]
        self.prompts: List[str] = []

    def confirm(self, message: str) -> bool:
        index = min(len(self.prompts), len(self._answers) - 1)
        self.prompts.append(message)
        return self._answers[index]
