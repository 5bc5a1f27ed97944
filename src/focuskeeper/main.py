"""Main entry point for FocusKeeper."""

import typer

from focuskeeper import __version__
from focuskeeper.commands import config, focus, goals, stats, tasks
from focuskeeper.services.config_service import get_config_service
from focuskeeper.utils.logger import log_file_path
from focuskeeper.utils.ui.console import get_console

app = typer.Typer(
    name="focuskeeper",
    help="Pomodoro focus timer with daily goals and productivity stats",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(focus.app, name="focus", help="Pomodoro focus timer")
app.add_typer(goals.app, name="goals", help="Daily focus goals")
app.add_typer(stats.app, name="stats", help="Productivity statistics")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information and the active context."""
    console.print(f"[bold]FocusKeeper[/bold] version [cyan]{__version__}[/cyan]")
    context = get_config_service().get_current_context()
    console.print(f"[dim]Context: {context.name} ({context.type}: {context.source})[/dim]")
    console.print(f"[dim]Log: {log_file_path()}[/dim]")


def main() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    main()
