"""Daily goal commands."""

import typer
from rich.table import Table

from focuskeeper.models.focus.goals import summarize_goals
from focuskeeper.services.focus_service import open_focus_service
from focuskeeper.utils.ui.console import get_console
from focuskeeper.utils.ui.formatters import (
    format_output,
    format_success,
    get_completion_color,
    get_progress_bar,
)

from .decorators import command_wrapper

console = get_console()
app = typer.Typer(help="Daily focus goals")


@app.command("show")
@command_wrapper
async def show_goal(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show today's goal and progress."""
    async with open_focus_service() as service:
        goal = service.daily_goal

    if output != "pretty":
        format_output({**goal.to_dict(), "progress_percent": goal.progress_percent}, output)
        return

    pct = goal.progress_percent
    color = get_completion_color(pct)
    console.print(f"\n[bold cyan]🎯 Daily Goal[/bold cyan] {goal.date}\n")
    console.print(
        f"  Pomodoros:  {goal.achieved}/{goal.target}  "
        f"[{color}]{get_progress_bar(pct, width=12)}[/{color}] {pct:.0f}%"
    )
    if goal.is_met:
        console.print("\n[bold green]🎉 Goal reached![/bold green]")
    elif goal.target > 0:
        console.print(f"\n[dim]💡 {goal.remaining} more to reach today's goal[/dim]")


@app.command("set-target")
@command_wrapper
async def set_target(
    target: int = typer.Argument(..., min=0, help="Pomodoros per day"),
) -> None:
    """Set today's target."""
    async with open_focus_service() as service:
        goal = await service.set_daily_target(target)
    format_success(f"Today's target set to {goal.target}")


@app.command("history")
@command_wrapper
async def history(
    days: int = typer.Option(7, "--days", "-d", min=1, help="Number of days"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """Show recent daily goals."""
    async with open_focus_service() as service:
        goals = await service.goal_history(days)
    summary = summarize_goals(goals)

    if output != "pretty":
        format_output({"goals": [g.to_dict() for g in goals], "summary": summary}, output)
        return

    if not goals:
        console.print("[yellow]No goals recorded yet[/yellow]")
        return

    table = Table(title=f"Last {days} days", show_header=True, header_style="bold magenta")
    table.add_column("Date")
    table.add_column("Done", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Progress")
    for goal in goals:
        pct = goal.progress_percent
        color = get_completion_color(pct)
        mark = " ✓" if goal.is_met else ""
        table.add_row(
            goal.date,
            str(goal.achieved),
            str(goal.target),
            f"[{color}]{get_progress_bar(pct)}[/{color}]{mark}",
        )
    console.print(table)
    console.print(
        f"Met {summary['days_met']}/{summary['days']} days "
        f"({summary['hit_rate']:.0f}%), {summary['total_achieved']} pomodoros total"
    )
