"""Productivity statistics command."""

import typer

from focuskeeper.services.focus_service import open_focus_service
from focuskeeper.utils.ui.console import get_console
from focuskeeper.utils.ui.formatters import format_duration, format_output

from .decorators import command_wrapper

console = get_console()
app = typer.Typer(help="Productivity statistics")


@app.command("show")
@command_wrapper
async def show_stats(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show lifetime focus statistics."""
    async with open_focus_service() as service:
        stats = service.stats

    if output != "pretty":
        format_output(stats.to_dict(), output)
        return

    console.print("\n[bold cyan]📊 Productivity[/bold cyan]\n")
    console.print(f"  Pomodoros:       {stats.total_completed_phases}")
    console.print(f"  Focus time:      {format_duration(stats.total_focus_minutes)}")
    console.print(f"  Daily average:   {format_duration(stats.daily_average_minutes)}")
    console.print(f"  Current streak:  {stats.current_streak_days} days")
    console.print(f"  Longest streak:  {stats.longest_streak_days} days")
