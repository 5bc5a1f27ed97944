"""Database migration system for SQLite local vault."""

from .m001_initial_schema import initial_migration
from .m002_task_credit_serial import task_credit_serial_migration
from .runner import Migration, MigrationRunner, run_migrations

ALL_MIGRATIONS: list[Migration] = [
    initial_migration,
    task_credit_serial_migration,
]

__all__ = [
    "ALL_MIGRATIONS",
    "Migration",
    "MigrationRunner",
    "run_migrations",
]
