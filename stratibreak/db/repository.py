"""Data access layer for Stratibreak.

Project lookups and listings can be scoped to a tenant.
"""

import json
import sqlite3
from datetime import date, datetime
from uuid import uuid4

from stratibreak.exceptions import (
    DataValidationError,
    ProjectConflictError,
    ProjectNotFoundError,
)
from stratibreak.models.enums import GapType
from stratibreak.models.gap import Gap, Impact, ProjectArea, RootCause
from stratibreak.models.project import Project, ProjectGoal, ProjectState
from stratibreak.models.results import GapAnalysisResult
from stratibreak.validation import raise_for_errors, validate_gap_filter


def _rows(cursor: sqlite3.Cursor) -> list[dict]:
    columns = [desc[0] for desc in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


class GapRepository:
    """CRUD operations for tenants, projects, gaps and analysis runs."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # --- Tenants ---

    def _insert_tenant(self, tenant_id: str, name: str | None = None) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO tenants (id, name) VALUES (?, ?)",
            (tenant_id, name or tenant_id),
        )

    def get_tenants(self) -> list[dict]:
        return _rows(self.conn.execute("SELECT * FROM tenants ORDER BY id"))

    # --- Projects ---

    def save_project(self, project: Project, source: str | None = None) -> None:
        """Insert or replace a project with its goals, and record its current state.

        Goals are replaced wholesale; states accumulate so earlier snapshots
        stay available. A project ID owned by another tenant is never touched.
        """
        try:
            with self.conn:
                self._insert_tenant(project.tenant_id)
                cursor = self.conn.execute(
                    """INSERT INTO projects (id, tenant_id, name, description, status, source)
                       VALUES (?, ?, ?, ?, ?, ?)
                       ON CONFLICT(id) DO UPDATE SET
                           name = excluded.name,
                           description = excluded.description,
                           status = excluded.status,
                           source = excluded.source,
                           updated_at = datetime('now')
                       WHERE projects.tenant_id = excluded.tenant_id""",
                    (
                        project.id,
                        project.tenant_id,
                        project.name,
                        project.description,
                        project.status.value,
                        source,
                    ),
                )
                if cursor.rowcount == 0:
                    raise ProjectConflictError(project.id, project.tenant_id)
                self._replace_goals(project)
                self.conn.execute(
                    "INSERT INTO project_states (project_id, state) VALUES (?, ?)",
                    (project.id, project.state.model_dump_json()),
                )
        except sqlite3.IntegrityError as e:
            raise DataValidationError("goals", f"project {project.id} cannot be stored: {e}") from e

    def _replace_goals(self, project: Project) -> None:
        self.conn.execute("DELETE FROM project_goals WHERE project_id = ?", (project.id,))
        for goal in project.goals:
            self.conn.execute(
                """INSERT INTO project_goals
                   (id, project_id, title, description, target_value, current_value, due_date)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    goal.id,
                    project.id,
                    goal.title,
                    goal.description,
                    json.dumps(goal.target_value),
                    json.dumps(goal.current_value) if goal.current_value is not None else None,
                    goal.due_date.isoformat() if goal.due_date else None,
                ),
            )

    def get_project(self, project_id: str, tenant_id: str | None = None) -> Project:
        """Load a project with its goals and most recent state."""
        if tenant_id is not None:
            cursor = self.conn.execute(
                "SELECT * FROM projects WHERE id = ? AND tenant_id = ?",
                (project_id, tenant_id),
            )
        else:
            cursor = self.conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,))
        rows = _rows(cursor)
        if not rows:
            raise ProjectNotFoundError(project_id)
        record = rows[0]

        goals = [
            ProjectGoal(
                id=row["id"],
                project_id=project_id,
                title=row["title"],
                description=row["description"],
                target_value=json.loads(row["target_value"]),
                current_value=json.loads(row["current_value"]) if row["current_value"] else None,
                due_date=date.fromisoformat(row["due_date"]) if row["due_date"] else None,
            )
            for row in _rows(self.conn.execute(
                "SELECT * FROM project_goals WHERE project_id = ? ORDER BY rowid",
                (project_id,),
            ))
        ]

        state_row = self.conn.execute(
            "SELECT state FROM project_states WHERE project_id = ? ORDER BY id DESC LIMIT 1",
            (project_id,),
        ).fetchone()
        state = (
            ProjectState.model_validate_json(state_row[0])
            if state_row
            else ProjectState(project_id=project_id)
        )

        return Project(
            id=record["id"],
            tenant_id=record["tenant_id"],
            name=record["name"],
            description=record["description"],
            status=record["status"],
            goals=goals,
            state=state,
        )

    def get_projects(self, tenant_id: str | None = None) -> list[dict]:
        if tenant_id is not None:
            cursor = self.conn.execute(
                "SELECT * FROM projects WHERE tenant_id = ? ORDER BY name", (tenant_id,)
            )
        else:
            cursor = self.conn.execute("SELECT * FROM projects ORDER BY name")
        return _rows(cursor)

    def get_state_history(self, project_id: str) -> list[dict]:
        cursor = self.conn.execute(
            "SELECT * FROM project_states WHERE project_id = ? ORDER BY id",
            (project_id,),
        )
        rows = _rows(cursor)
        for row in rows:
            row["state"] = json.loads(row["state"])
        return rows

    # --- Gaps ---

    def save_gap(self, gap: Gap, tenant_id: str, run_id: str | None = None) -> str:
        """Insert a gap with its root causes and affected areas. Returns the gap ID."""
        return self.save_gaps([gap], tenant_id, run_id)[0]

    def save_gaps(self, gaps: list[Gap], tenant_id: str, run_id: str | None = None) -> list[str]:
        """Insert gaps in a single transaction. Nothing is stored if any gap fails."""
        with self.conn:
            return [self._insert_gap(gap, tenant_id, run_id) for gap in gaps]

    def _insert_gap(self, gap: Gap, tenant_id: str, run_id: str | None) -> str:
        try:
            self.conn.execute(
                """INSERT INTO gaps
                   (id, project_id, tenant_id, run_id, type, category, severity,
                    title, description, current_value, target_value, variance,
                    estimated_impact, confidence, status, priority, tags, identified_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    gap.id,
                    gap.project_id,
                    tenant_id,
                    run_id,
                    gap.type.value,
                    gap.category.value if gap.category else None,
                    gap.severity.value,
                    gap.title,
                    gap.description,
                    json.dumps(gap.current_value),
                    json.dumps(gap.target_value),
                    gap.variance,
                    gap.estimated_impact.model_dump_json() if gap.estimated_impact else None,
                    gap.confidence,
                    gap.status.value,
                    gap.priority.value if gap.priority else None,
                    json.dumps(gap.tags),
                    gap.identified_at.isoformat(),
                ),
            )
            for rc in gap.root_causes:
                self.conn.execute(
                    """INSERT INTO root_causes
                       (id, gap_id, category, description, confidence, evidence, contribution_weight)
                       VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (
                        rc.id,
                        gap.id,
                        rc.category.value,
                        rc.description,
                        rc.confidence,
                        json.dumps(rc.evidence),
                        rc.contribution_weight,
                    ),
                )
            for area in gap.affected_areas:
                self.conn.execute(
                    """INSERT INTO project_areas
                       (id, gap_id, name, description, owner, criticality)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (area.id, gap.id, area.name, area.description, area.owner, area.criticality.value),
                )
        except sqlite3.IntegrityError as e:
            raise DataValidationError("id", f"gap {gap.id} cannot be stored: {e}") from e
        return gap.id

    def get_gaps(
        self,
        project_id: str,
        run_id: str | None = None,
        gap_type: str | None = None,
        category: str | None = None,
        severity: str | None = None,
        status: str | None = None,
        tags: list[str] | None = None,
        min_confidence: float | None = None,
        max_confidence: float | None = None,
    ) -> list[Gap]:
        """Retrieve gaps for a project. Tag filtering matches any of the given tags."""
        raise_for_errors(validate_gap_filter({
            "type": gap_type,
            "category": category,
            "severity": severity,
            "status": status,
            "tags": tags,
            "min_confidence": min_confidence,
            "max_confidence": max_confidence,
        }))
        clauses = ["project_id = ?"]
        params: list = [project_id]
        for column, value in (
            ("run_id", run_id),
            ("type", gap_type),
            ("category", category),
            ("severity", severity),
            ("status", status),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        if min_confidence is not None:
            clauses.append("confidence >= ?")
            params.append(min_confidence)
        if max_confidence is not None:
            clauses.append("confidence <= ?")
            params.append(max_confidence)
        if tags:
            placeholders = ", ".join("?" for _ in tags)
            clauses.append(
                f"EXISTS (SELECT 1 FROM json_each(gaps.tags) WHERE json_each.value IN ({placeholders}))"
            )
            params.extend(tags)

        cursor = self.conn.execute(
            f"SELECT * FROM gaps WHERE {' AND '.join(clauses)} ORDER BY rowid",
            params,
        )
        return [self._gap_from_row(row) for row in _rows(cursor)]

    def count_gaps_by_type(self, project_id: str, run_id: str | None = None) -> dict[GapType, int]:
        sql = "SELECT type, COUNT(*) FROM gaps WHERE project_id = ?"
        params: list = [project_id]
        if run_id is not None:
            sql += " AND run_id = ?"
            params.append(run_id)
        counts = dict(self.conn.execute(sql + " GROUP BY type", params).fetchall())
        return {gap_type: counts.get(gap_type.value, 0) for gap_type in GapType}

    def _gap_from_row(self, row: dict) -> Gap:
        root_causes = [
            RootCause(
                id=rc["id"],
                category=rc["category"],
                description=rc["description"],
                confidence=rc["confidence"],
                evidence=json.loads(rc["evidence"]),
                contribution_weight=rc["contribution_weight"],
            )
            for rc in _rows(self.conn.execute(
                "SELECT * FROM root_causes WHERE gap_id = ? ORDER BY rowid", (row["id"],)
            ))
        ]
        areas = [
            ProjectArea(
                id=area["id"],
                name=area["name"],
                description=area["description"],
                owner=area["owner"],
                criticality=area["criticality"],
            )
            for area in _rows(self.conn.execute(
                "SELECT * FROM project_areas WHERE gap_id = ? ORDER BY rowid", (row["id"],)
            ))
        ]
        impact = row["estimated_impact"]
        return Gap(
            id=row["id"],
            project_id=row["project_id"],
            type=row["type"],
            category=row["category"],
            severity=row["severity"],
            title=row["title"],
            description=row["description"],
            current_value=json.loads(row["current_value"]),
            target_value=json.loads(row["target_value"]),
            variance=row["variance"],
            root_causes=root_causes,
            affected_areas=areas,
            estimated_impact=Impact.model_validate_json(impact) if impact else None,
            confidence=row["confidence"],
            status=row["status"],
            priority=row["priority"],
            tags=json.loads(row["tags"]),
            identified_at=datetime.fromisoformat(row["identified_at"]),
        )

    # --- Analysis runs ---

    def save_analysis_run(self, result: GapAnalysisResult, tenant_id: str) -> str:
        """Record an analysis run and the gaps it found, atomically. Returns the run ID."""
        run_id = str(uuid4())
        summary = result.summary
        with self.conn:
            try:
                self.conn.execute(
                    """INSERT INTO analysis_runs
                       (id, project_id, tenant_id, run_at, total_gaps, critical_gaps,
                        high_priority_gaps, overall_health_score, confidence,
                        execution_time_ms, summary, recommendations)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        run_id,
                        result.project_id,
                        tenant_id,
                        result.analysis_timestamp.isoformat(),
                        summary.total_gaps,
                        summary.critical_gaps,
                        summary.high_priority_gaps,
                        result.overall_health_score,
                        result.confidence,
                        result.execution_time_ms,
                        summary.model_dump_json(),
                        json.dumps([r.model_dump(mode="json") for r in result.prioritized_recommendations]),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise DataValidationError(
                    "project_id", f"run for project {result.project_id} cannot be stored: {e}"
                ) from e
            for gap in result.all_gaps:
                self._insert_gap(gap, tenant_id, run_id)
        return run_id

    def get_analysis_runs(self, project_id: str) -> list[dict]:
        cursor = self.conn.execute(
            "SELECT * FROM analysis_runs WHERE project_id = ? ORDER BY run_at DESC, rowid DESC",
            (project_id,),
        )
        rows = _rows(cursor)
        for row in rows:
            row["summary"] = json.loads(row["summary"])
            row["recommendations"] = json.loads(row["recommendations"])
        return rows

    def get_latest_run(self, project_id: str) -> dict | None:
        runs = self.get_analysis_runs(project_id)
        return runs[0] if runs else None
