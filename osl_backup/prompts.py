"""Interactive input for the restore workflow."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.prompt import Prompt


class Prompter(Protocol):
    """Source of answers to interactive questions."""

    def ask(self, message: str) -> str: ...


class ConsolePrompter:
    """Ask on the terminal. End of input reads as an empty answer."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def ask(self, message: str) -> str:
        try:
            return Prompt.ask(message, console=self.console)
        except EOFError:
            return ""
