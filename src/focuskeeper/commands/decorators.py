"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer

from focuskeeper.models.exceptions import (
    FocusKeeperError,
    NotFoundError,
    PersistenceError,
    SessionBusyError,
    ValidationError,
)
from focuskeeper.utils import exit_codes
from focuskeeper.utils.logger import get_logger
from focuskeeper.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(error: FocusKeeperError) -> int:
    """Semantic exit code of a domain error."""
    if isinstance(error, ValidationError):
        return exit_codes.ERROR_INVALID_ARGS
    if isinstance(error, NotFoundError):
        return exit_codes.ERROR_NOT_FOUND
    if isinstance(error, SessionBusyError):
        return exit_codes.ERROR_SESSION_BUSY
    if isinstance(error, PersistenceError):
        return exit_codes.ERROR_PERSISTENCE
    return exit_codes.ERROR_GENERAL


def command_wrapper(func: Callable):
    """Decorator to wrap command functions with logging and error reporting."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger("cli")
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if asyncio.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except FocusKeeperError as e:
            logger.error(
                "command failed: %s (%.3fs) - %s", cmd, time.monotonic() - start, str(e)
            )
            format_error(str(e))
            raise typer.Exit(code=exit_code_for(e)) from e

        except AppError as e:
            logger.error(
                "command failed: %s (%.3fs) - %s", cmd, time.monotonic() - start, str(e)
            )
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit:
            # Re-raise Typer's own exits (like --help or explicit Exit(0))
            raise

        except Exception as e:
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                time.monotonic() - start,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
