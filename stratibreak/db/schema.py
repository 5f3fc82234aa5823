"""SQLite database schema definition."""

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 3

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS tenants (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    tenant_id TEXT NOT NULL REFERENCES tenants(id),
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'active',
    source TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS project_goals (
    id TEXT NOT NULL,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    target_value TEXT NOT NULL,
    current_value TEXT,
    due_date TEXT,
    PRIMARY KEY (project_id, id)
);

CREATE TABLE IF NOT EXISTS project_states (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    state TEXT NOT NULL,
    captured_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS analysis_runs (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    tenant_id TEXT NOT NULL REFERENCES tenants(id),
    run_at TEXT NOT NULL DEFAULT (datetime('now')),
    total_gaps INTEGER NOT NULL DEFAULT 0,
    critical_gaps INTEGER NOT NULL DEFAULT 0,
    high_priority_gaps INTEGER NOT NULL DEFAULT 0,
    overall_health_score REAL NOT NULL,
    confidence REAL NOT NULL,
    execution_time_ms REAL NOT NULL DEFAULT 0,
    summary TEXT NOT NULL,
    recommendations TEXT NOT NULL DEFAULT '[]',
    status TEXT NOT NULL DEFAULT 'completed'
);

CREATE TABLE IF NOT EXISTS gaps (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    tenant_id TEXT NOT NULL REFERENCES tenants(id),
    run_id TEXT REFERENCES analysis_runs(id) ON DELETE CASCADE,
    type TEXT NOT NULL,
    category TEXT,
    severity TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    current_value TEXT NOT NULL,
    target_value TEXT NOT NULL,
    variance REAL NOT NULL DEFAULT 0,
    estimated_impact TEXT,
    confidence REAL,
    status TEXT NOT NULL DEFAULT 'open',
    priority TEXT,
    tags TEXT NOT NULL DEFAULT '[]',
    identified_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_gaps_project ON gaps(project_id, run_id);

CREATE TABLE IF NOT EXISTS root_causes (
    id TEXT PRIMARY KEY,
    gap_id TEXT NOT NULL REFERENCES gaps(id) ON DELETE CASCADE,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    confidence REAL NOT NULL,
    evidence TEXT NOT NULL DEFAULT '[]',
    contribution_weight REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS project_areas (
    id TEXT PRIMARY KEY,
    gap_id TEXT NOT NULL REFERENCES gaps(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    owner TEXT,
    criticality TEXT NOT NULL DEFAULT 'medium'
);
"""


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def create_schema(db_path: Path) -> sqlite3.Connection:
    """Create the database schema and bring older files up to date. Returns the connection."""
    from stratibreak.db.migrations import migrate

    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = connect(db_path)
    # Older files get their missing columns before the indexes that use them
    migrate(conn)
    conn.executescript(SCHEMA_SQL)
    conn.execute(
        "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
        (SCHEMA_VERSION,),
    )
    conn.commit()
    return conn
