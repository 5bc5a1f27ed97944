"""Configuration management commands."""

import typer
from rich.table import Table

from focuskeeper.models.config_models import Context
from focuskeeper.services.config_service import get_config_service
from focuskeeper.utils.exit_codes import ERROR_INVALID_ARGS
from focuskeeper.utils.ui.console import get_console
from focuskeeper.utils.ui.formatters import format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Configuration management commands")
console = get_console()


@app.command("show")
@command_wrapper
def show_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show the configuration and available contexts."""
    config_service = get_config_service()
    config = config_service.config

    if output != "table":
        format_output(config.model_dump(), output)
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("")
    table.add_column("Context")
    table.add_column("Type")
    table.add_column("Source")
    table.add_column("User")
    for ctx in config.contexts:
        current = "*" if ctx.name == config.current_context_name else ""
        table.add_row(current, ctx.name, ctx.type, ctx.source, ctx.user_id)
    console.print(table)
    console.print(f"[dim]Config file: {config_service.config_path}[/dim]")


@app.command("use")
@command_wrapper
def use_context(name: str = typer.Argument(..., help="Context name")) -> None:
    """Switch the active context."""
    try:
        context = get_config_service().use_context(name)
    except ValueError as e:
        raise AppError(str(e), ERROR_INVALID_ARGS) from e
    format_success(f"Switched to context '{context.name}' ({context.type})")


@app.command("add-context")
@command_wrapper
def add_context(
    name: str = typer.Argument(..., help="Context name"),
    source: str = typer.Option(..., "--source", "-s", help="Vault path or API URL"),
    context_type: str = typer.Option("local", "--type", "-t", help="local or remote"),
    user_id: str = typer.Option("local-user", "--user", "-u", help="User id"),
    description: str = typer.Option("", "--description", help="Description"),
) -> None:
    """Add a storage context."""
    try:
        context = Context(
            name=name,
            type=context_type,
            source=source,
            user_id=user_id,
            description=description,
        )
        get_config_service().add_context(context)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        raise AppError(str(e), ERROR_INVALID_ARGS) from e
    format_success(f"Context '{name}' added")


@app.command("set-token")
@command_wrapper
def set_token(
    token: str = typer.Argument(..., help="Bearer token for the document store"),
    context_name: str | None = typer.Option(None, "--context", "-c", help="Context name"),
) -> None:
    """Store the API token of a remote context."""
    config_service = get_config_service()
    name = context_name or config_service.get_current_context().name
    config_service.save_credentials(token, context_name=name)
    format_success(f"Token saved for context '{name}'")
