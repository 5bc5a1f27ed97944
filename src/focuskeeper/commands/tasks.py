"""Task commands."""

import typer
from rich.table import Table

from focuskeeper.services.task_service import get_task_service
from focuskeeper.utils.exit_codes import ERROR_NOT_FOUND
from focuskeeper.utils.ui.console import get_console
from focuskeeper.utils.ui.formatters import format_info, format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Tasks that focus time is credited to")
console = get_console()


@app.command("add")
@command_wrapper
async def add_task(text: str = typer.Argument(..., help="Task description")) -> None:
    """Add a task."""
    task = await get_task_service().add_task(text)
    format_success(f"Task added: {task.text} ({task.id[:8]})")


@app.command("list")
@command_wrapper
async def list_tasks(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List tasks with their pomodoro counts."""
    tasks = await get_task_service().list_tasks()

    if output != "pretty":
        format_output([t.model_dump(mode="json") for t in tasks], output)
        return
    if not tasks:
        console.print("[yellow]No tasks yet[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Task")
    table.add_column("🍅", justify="right")
    for task in tasks:
        table.add_row(task.id[:8], task.text, str(task.pomodoros_completed))
    console.print(table)


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    service = get_task_service()
    task = await service.get_task(task_id)

    if not force:
        confirm = typer.confirm(f"Delete task '{task.text}'?")
        if not confirm:
            format_info("Cancelled")
            raise typer.Exit(0)

    if not await service.delete_task(task.id):
        raise AppError(f"Task not found: {task_id}", ERROR_NOT_FOUND)
    format_success(f"Task deleted: {task.text}")
