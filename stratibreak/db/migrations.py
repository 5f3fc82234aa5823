"""Database schema migrations."""

import logging
import sqlite3

from stratibreak.db.schema import SCHEMA_VERSION

logger = logging.getLogger(__name__)


def get_current_version(conn: sqlite3.Connection) -> int:
    """Get the current schema version from the database."""
    try:
        cursor = conn.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        return row[0] if row and row[0] else 0
    except sqlite3.OperationalError:
        return 0


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}


def _tables(conn: sqlite3.Connection) -> set[str]:
    return {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}


def migrate(conn: sqlite3.Connection) -> None:
    """Run any pending migrations. A fresh database has nothing to migrate."""
    current = get_current_version(conn)
    if current == 0 or current >= SCHEMA_VERSION:
        return

    if current < 2:
        # v1 stored every gap ever detected without linking it to a run
        if "run_id" not in _columns(conn, "gaps"):
            conn.execute(
                "ALTER TABLE gaps ADD COLUMN run_id TEXT "
                "REFERENCES analysis_runs(id) ON DELETE CASCADE"
            )
        if "recommendations" not in _columns(conn, "analysis_runs"):
            conn.execute(
                "ALTER TABLE analysis_runs ADD COLUMN recommendations TEXT NOT NULL DEFAULT '[]'"
            )
        conn.execute("INSERT INTO schema_version (version) VALUES (2)")
        conn.commit()

    if current < 3:
        # v2 goal ids were unique across every project, not per project
        if "project_goals" in _tables(conn):
            conn.executescript("""
                ALTER TABLE project_goals RENAME TO project_goals_v2;
                CREATE TABLE project_goals (
                    id TEXT NOT NULL,
                    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    target_value TEXT NOT NULL,
                    current_value TEXT,
                    due_date TEXT,
                    PRIMARY KEY (project_id, id)
                );
                INSERT INTO project_goals
                    (id, project_id, title, description, target_value, current_value, due_date)
                    SELECT id, project_id, title, description, target_value, current_value, due_date
                    FROM project_goals_v2 ORDER BY rowid;
                DROP TABLE project_goals_v2;
            """)
        conn.execute("INSERT INTO schema_version (version) VALUES (3)")
        conn.commit()

    logger.info("Migrated database schema from version %d to %d", current, SCHEMA_VERSION)
