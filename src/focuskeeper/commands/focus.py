"""Focus timer commands."""

import typer

from focuskeeper.models.focus import FOCUS
from focuskeeper.models.focus.ui import TimerDisplay
from focuskeeper.services.config_service import get_config_service
from focuskeeper.services.focus_service import open_focus_service
from focuskeeper.services.notification_service import ConsoleNotifier
from focuskeeper.services.task_service import get_task_service
from focuskeeper.utils.ui.console import get_console
from focuskeeper.utils.ui.formatters import (
    format_clock,
    format_output,
    format_success,
    get_progress_bar,
)

from .decorators import command_wrapper

app = typer.Typer(help="Pomodoro focus timer")
console = get_console()


def _notifier() -> ConsoleNotifier:
    return ConsoleNotifier(console, bell=get_config_service().config.focus.bell)


def _print_status(status: dict) -> None:
    phase = "Focus" if status["phase"] == FOCUS else "Break"
    state = "running" if status["is_running"] else "paused"
    pct = int(status["progress"] * 100)
    console.print(
        f"[bold cyan]{phase}[/bold cyan] {format_clock(status['seconds_remaining'])} "
        f"({state})  {get_progress_bar(pct)} {pct}%"
    )
    console.print(
        f"Today: {status['goal_achieved']}/{status['goal_target']} pomodoros  •  "
        f"this session: {status['completed_focus_phases']}"
    )
    if status["linked_task_id"]:
        console.print(f"[dim]Linked task: {status['linked_task_id']}[/dim]")
    if status["pending_writes"]:
        console.print(f"[yellow]{status['pending_writes']} completion(s) not yet saved[/yellow]")
    if status.get("read_only"):
        console.print("[dim]Controlled by another running focuskeeper process[/dim]")


@app.command("status")
@command_wrapper
async def status(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show the timer state."""
    async with open_focus_service(_notifier()) as service:
        snapshot = service.status()
    if output == "pretty":
        _print_status(snapshot)
    else:
        format_output(snapshot, output)


@app.command("start")
@command_wrapper
async def start() -> None:
    """Start or resume the countdown."""
    async with open_focus_service(_notifier()) as service:
        changed = await service.start()
        snapshot = service.status()
    if changed:
        format_success(f"Timer started: {format_clock(snapshot['seconds_remaining'])} left")
    else:
        console.print("Timer is already running.")


@app.command("pause")
@command_wrapper
async def pause() -> None:
    """Pause the countdown."""
    async with open_focus_service(_notifier()) as service:
        changed = await service.pause()
        snapshot = service.status()
    if changed:
        format_success(f"Timer paused at {format_clock(snapshot['seconds_remaining'])}")
    else:
        console.print("Timer is not running.")


@app.command("reset")
@command_wrapper
async def reset() -> None:
    """Reset to a fresh focus phase."""
    async with open_focus_service(_notifier()) as service:
        await service.reset()
        snapshot = service.status()
    format_success(f"Timer reset to {format_clock(snapshot['seconds_remaining'])}")


@app.command("run")
@command_wrapper
async def run(
    start_now: bool = typer.Option(True, "--start/--no-start", help="Start the countdown"),
) -> None:
    """Open the full-screen live timer."""
    async with open_focus_service() as service:
        service.ensure_owner()
        if start_now:
            await service.start()
        await TimerDisplay(console).run(service)
        snapshot = service.status()
    _print_status(snapshot)


@app.command("settings")
@command_wrapper
async def settings(
    focus_minutes: int | None = typer.Option(None, "--focus", "-f", help="Focus length (1-60)"),
    break_minutes: int | None = typer.Option(None, "--break", "-b", help="Break length (1-30)"),
    clamp: bool = typer.Option(False, "--clamp", help="Clamp out-of-range values"),
) -> None:
    """Show or change phase durations."""
    async with open_focus_service() as service:
        current = service.settings
        if focus_minutes is None and break_minutes is None:
            console.print(
                f"Focus: [cyan]{current.focus_minutes}[/cyan] min  •  "
                f"Break: [cyan]{current.break_minutes}[/cyan] min"
            )
            return
        new = await service.apply_settings(
            focus_minutes if focus_minutes is not None else current.focus_minutes,
            break_minutes if break_minutes is not None else current.break_minutes,
            clamp=clamp,
        )
    format_success(f"Focus {new.focus_minutes} min, break {new.break_minutes} min")


@app.command("link")
@command_wrapper
async def link(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """Credit the next completed focus phase to a task."""
    task = await get_task_service().get_task(task_id)
    async with open_focus_service() as service:
        await service.link_task(task.id)
    format_success(f"Linked to: {task.text}")


@app.command("unlink")
@command_wrapper
async def unlink() -> None:
    """Stop crediting a task."""
    async with open_focus_service() as service:
        await service.link_task(None)
    format_success("Task unlinked")
