"""Full-screen timer UI for focus mode."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.text import Text

from focuskeeper.models.exceptions import PersistenceError
from focuskeeper.utils.ui.formatters import format_clock, get_progress_bar

from .quotes import Quote, random_quote
from .session import FOCUS

if TYPE_CHECKING:
    from focuskeeper.services.focus_service import FocusService

POLL_SECONDS = 0.1


class TimerDisplay:
    """Manages the fullscreen timer display."""

    def __init__(self, console: Console | None = None, quote: Quote | None = None):
        self.console = console or Console()
        self.quote = quote or random_quote()
        self.message: str | None = None

    def create_layout(self, status: dict[str, Any]) -> Layout:
        """Create the timer layout with all components."""
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        is_focus = status["phase"] == FOCUS
        if not status["is_running"]:
            title, color = "PAUSED" if status["progress"] > 0 else "READY", "yellow"
        elif is_focus:
            title, color = "FOCUS", "cyan"
        else:
            title, color = "BREAK", "green"

        emoji = "🍅" if is_focus else "☕"
        header_text = Text(f"{emoji}  {title}", style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header_text, vertical="middle"))

        layout["body"].update(Align.center(self._create_body(status), vertical="middle"))
        layout["footer"].update(
            Align.center(self._create_footer(status["is_running"]), vertical="middle")
        )
        return layout

    def _create_body(self, status: dict[str, Any]) -> Group:
        remaining = status["seconds_remaining"]
        if not status["is_running"]:
            timer_color = "yellow"
        elif remaining < 60:
            timer_color = "red"
        else:
            timer_color = "cyan" if status["phase"] == FOCUS else "green"

        progress_pct = int(status["progress"] * 100)
        components = [
            Text(format_clock(remaining), style=f"bold {timer_color}", justify="center"),
            Text(""),
            Text(
                f"{get_progress_bar(progress_pct, width=40)}  {progress_pct}%",
                style="dim",
                justify="center",
            ),
            Text(""),
            Text(
                f"Today {status['goal_achieved']}/{status['goal_target']}"
                f"  •  Session {status['completed_focus_phases']} 🍅",
                justify="center",
            ),
        ]
        if status["linked_task_id"]:
            components.append(
                Text(f"Working on #{status['linked_task_id'][:8]}", style="dim", justify="center")
            )
        if self.message:
            components.extend([Text(""), Text(self.message, style="bold magenta", justify="center")])
        components.extend(
            [
                Text(""),
                Text(f'"{self.quote.text}"', style="italic", justify="center"),
                Text(f"- {self.quote.author}", style="dim", justify="center"),
            ]
        )
        return Group(*components)

    def _create_footer(self, is_running: bool) -> Text:
        action = "pause" if is_running else "start"
        hints = f"Press space to {action}  •  'r' to reset  •  'w' to retry saving  •  'q' to quit"
        return Text(hints, style="dim", justify="center")

    # Listener hooks; the service calls these from its tick

    def on_phase_completed(self, previous_phase: str, task_credited: bool) -> None:
        if previous_phase == FOCUS:
            self.message = "Pomodoro Complete! Time for a break!"
            if task_credited:
                self.message += " (task credited)"
        else:
            self.message = "Break Complete! Time to focus!"

    def on_persistence_error(self, error: Exception) -> None:
        self.message = f"Not saved: {error}"

    async def run(self, service: FocusService) -> None:
        """Drive the live view until the user quits; quitting pauses the timer."""
        from .keyboard import KeyboardHandler

        keyboard = KeyboardHandler()
        service.add_listener(self)
        try:
            with Live(
                self.create_layout(service.status()),
                console=self.console,
                refresh_per_second=4,
                screen=True,
            ) as live:
                while True:
                    key = keyboard.get_key()
                    if key == "q":
                        break
                    try:
                        if key in (" ", "p", "s"):
                            if service.clock.is_running:
                                await service.pause()
                            else:
                                self.message = None
                                await service.start()
                        elif key == "r":
                            self.message = None
                            await service.reset()
                        elif key == "w" and service.pending_units:
                            remaining = await service.retry_failed_writes()
                            self.message = (
                                f"{remaining} completion(s) still unsaved" if remaining else "All progress saved"
                            )
                    except PersistenceError as e:
                        self.message = f"Not saved: {e}"

                    live.update(self.create_layout(service.status()))
                    await asyncio.sleep(POLL_SECONDS)
        finally:
            keyboard.stop()
            service.remove_listener(self)
            await service.pause()
