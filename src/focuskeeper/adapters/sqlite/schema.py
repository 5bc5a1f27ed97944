"""Database schema definitions for the local SQLite vault.

Focus records are kept as JSON documents addressed by ``(collection,
doc_id)``, mirroring the remote document store so both backends share one
record layout. Tasks get a regular table.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 2

# Collections
SESSIONS = "focus_sessions"
SETTINGS = "user_settings"
DAILY_GOALS = "daily_goals"
STATS = "productivity_stats"

CREATE_DOCUMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    doc_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    sort_key TEXT,
    body TEXT NOT NULL,
    updated_at DATETIME NOT NULL,
    PRIMARY KEY (collection, doc_id)
)
"""

CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    text TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    pomodoros_completed INTEGER NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL
)
"""

ALL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(collection, user_id, sort_key)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id, created_at)",
]

ADD_TASK_CREDIT_SERIAL = (
    "ALTER TABLE tasks ADD COLUMN last_credited_serial INTEGER NOT NULL DEFAULT 0"
)
