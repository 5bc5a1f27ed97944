"""Local vault connections.

Each vault file gets one SQLite connection for the life of the process,
shared by the focus and task repositories of every context pointing at it.
Opening a vault creates its directory, switches it to WAL, keeps the file
private to its owner and applies pending schema migrations.
"""

from __future__ import annotations

import atexit
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from focuskeeper.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner
from focuskeeper.utils.logger import get_logger

APP_NAME = "focuskeeper"
VAULT_FILENAME = "vault.db"
BUSY_TIMEOUT_SECONDS = 30.0

_connections: dict[Path, sqlite3.Connection] = {}
_exit_hook_registered = False


def default_vault_path(data_dir: str | Path | None = None) -> Path:
    """Vault file of the built-in local context."""
    return Path(data_dir or user_data_dir(APP_NAME)) / VAULT_FILENAME


def resolve_vault_path(db_path: str | Path | None = None) -> Path:
    """Absolute vault path for a context source ("~" is expanded)."""
    if db_path is None:
        return default_vault_path()
    return Path(db_path).expanduser().absolute()


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Return the open connection to a vault, opening it on first use."""
    global _exit_hook_registered

    path = resolve_vault_path(db_path)
    connection = _connections.get(path)
    if connection is None:
        connection = _open_vault(path)
        _connections[path] = connection
        if not _exit_hook_registered:
            atexit.register(close_connections)
            _exit_hook_registered = True
    return connection


def open_vaults() -> list[Path]:
    """Paths of the vaults currently open in this process."""
    return list(_connections)


def close_connections() -> None:
    """Commit and close every open vault."""
    while _connections:
        path, connection = _connections.popitem()
        try:
            connection.commit()
            connection.close()
        except sqlite3.Error as e:
            get_logger("sqlite").warning("closing vault %s failed: %s", path, e)


def _open_vault(path: Path) -> sqlite3.Connection:
    path.parent.mkdir(parents=True, exist_ok=True)
    is_new_vault = not path.exists()

    connection = sqlite3.connect(
        str(path), check_same_thread=False, timeout=BUSY_TIMEOUT_SECONDS
    )
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA journal_mode = WAL")
    connection.execute("PRAGMA foreign_keys = ON")
    if is_new_vault:
        os.chmod(path, 0o600)

    try:
        applied = MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)
    except RuntimeError:
        connection.close()
        raise
    get_logger("sqlite").info(
        "opened %s vault %s (%d migrations applied)",
        "new" if is_new_vault else "existing",
        path,
        applied,
    )
    return connection
