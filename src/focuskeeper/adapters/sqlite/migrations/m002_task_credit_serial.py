"""Track which completion last credited a task.

Adds ``tasks.last_credited_serial`` so a completion replayed after a restart
cannot bump the same counter twice.
"""

import sqlite3

from focuskeeper.adapters.sqlite import schema
from .runner import Migration


class TaskCreditSerialMigration(Migration):
    """Migration 002: add the task credit marker."""

    @property
    def version(self) -> int:
        return 2

    @property
    def description(self) -> str:
        return "Task credit serial"

    def up(self, connection: sqlite3.Connection) -> None:
        columns = {row[1] for row in connection.execute("PRAGMA table_info(tasks)")}
        if "last_credited_serial" not in columns:
            connection.execute(schema.ADD_TASK_CREDIT_SERIAL)


task_credit_serial_migration = TaskCreditSerialMigration()
