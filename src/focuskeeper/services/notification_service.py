"""Console notifications for phase transitions."""

from __future__ import annotations

from rich.console import Console

from focuskeeper.models.focus import FOCUS, Phase
from focuskeeper.utils.logger import get_logger
from focuskeeper.utils.ui.console import get_console

MESSAGES: dict[str, tuple[str, str]] = {
    "focus": ("Pomodoro Complete!", "Time for a break!"),
    "break": ("Break Complete!", "Time to focus!"),
}


def completion_message(previous_phase: Phase) -> tuple[str, str]:
    """Title and body announcing the end of *previous_phase*."""
    return MESSAGES[previous_phase]


class ConsoleNotifier:
    """Phase listener printing transitions to the terminal."""

    def __init__(self, console: Console | None = None, bell: bool = True):
        self.console = console or get_console()
        self.bell = bell

    def on_phase_completed(self, previous_phase: Phase, task_credited: bool) -> None:
        title, body = completion_message(previous_phase)
        if self.bell:
            self.console.bell()
        color = "green" if previous_phase == FOCUS else "cyan"
        self.console.print(f"[bold {color}]{title}[/bold {color}] {body}")
        if task_credited:
            self.console.print("[dim]Linked task credited with one pomodoro.[/dim]")

    def on_persistence_error(self, error: Exception) -> None:
        get_logger("notify").warning("notifying user of persistence failure: %s", error)
        self.console.print(
            f"[bold yellow]Warning:[/bold yellow] progress not saved ({error})"
        )
