"""Tests for the SQLite repository and schema migrations."""

import sqlite3

import pytest

from stratibreak.db.migrations import get_current_version, migrate
from stratibreak.db.schema import SCHEMA_VERSION, create_schema
from stratibreak.engines.analysis import GapAnalysisEngine
from stratibreak.exceptions import (
    DataValidationError,
    ProjectConflictError,
    ProjectNotFoundError,
)
from stratibreak.models.enums import GapType, SeverityLevel
from stratibreak.models.project import Project, ProjectGoal, ProjectState


@pytest.fixture
def saved_project(repo, sample_project):
    repo.save_project(sample_project, source="manual")
    return sample_project


class TestSchema:
    def test_fresh_database_at_current_version(self, db_conn):
        assert get_current_version(db_conn) == SCHEMA_VERSION

    def test_create_schema_is_idempotent(self, tmp_path):
        path = tmp_path / "nested" / "again.db"
        create_schema(path).close()
        conn = create_schema(path)
        assert get_current_version(conn) == SCHEMA_VERSION
        conn.close()

    def test_migrates_version_one(self, tmp_path):
        path = tmp_path / "old.db"
        conn = sqlite3.connect(str(path))
        conn.executescript("""
            CREATE TABLE schema_version (version INTEGER PRIMARY KEY, applied_at TEXT);
            INSERT INTO schema_version (version) VALUES (1);
            CREATE TABLE analysis_runs (id TEXT PRIMARY KEY, project_id TEXT);
            CREATE TABLE gaps (id TEXT PRIMARY KEY, project_id TEXT);
        """)
        migrate(conn)
        gap_columns = {row[1] for row in conn.execute("PRAGMA table_info(gaps)")}
        run_columns = {row[1] for row in conn.execute("PRAGMA table_info(analysis_runs)")}
        assert "run_id" in gap_columns
        assert "recommendations" in run_columns
        assert get_current_version(conn) == SCHEMA_VERSION
        conn.close()

    def test_migrates_goal_keys_per_project(self, tmp_path):
        path = tmp_path / "v2.db"
        conn = sqlite3.connect(str(path))
        conn.executescript("""
            CREATE TABLE schema_version (version INTEGER PRIMARY KEY, applied_at TEXT);
            INSERT INTO schema_version (version) VALUES (2);
            CREATE TABLE project_goals (
                id TEXT PRIMARY KEY, project_id TEXT NOT NULL, title TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '', target_value TEXT NOT NULL,
                current_value TEXT, due_date TEXT
            );
            INSERT INTO project_goals (id, project_id, title, target_value)
                VALUES ('g1', 'p1', 'Project completion', '0.8');
        """)
        migrate(conn)
        conn.execute(
            "INSERT INTO project_goals (id, project_id, title, target_value) "
            "VALUES ('g1', 'p2', 'Project completion', '0.9')"
        )
        rows = conn.execute("SELECT project_id FROM project_goals ORDER BY rowid").fetchall()
        assert rows == [("p1",), ("p2",)]
        assert get_current_version(conn) == SCHEMA_VERSION
        conn.close()


class TestProjects:
    def test_round_trip(self, repo, saved_project):
        loaded = repo.get_project(saved_project.id)
        assert loaded.name == "Apollo"
        assert loaded.tenant_id == "acme"
        assert [g.title for g in loaded.goals] == ["Project completion", "Quality score"]
        assert loaded.goals[1].target_value == {"value": 90}
        assert loaded.state == saved_project.state

    def test_tenant_scoping(self, repo, saved_project):
        assert repo.get_project(saved_project.id, "acme").id == saved_project.id
        with pytest.raises(ProjectNotFoundError, match=saved_project.id):
            repo.get_project(saved_project.id, "globex")

    def test_missing_project(self, repo):
        with pytest.raises(ProjectNotFoundError):
            repo.get_project("nope")

    def test_reimport_updates_and_keeps_history(self, repo, saved_project):
        updated = saved_project.model_copy(update={
            "name": "Apollo v2",
            "goals": saved_project.goals[:1],
            "state": saved_project.state.model_copy(update={"progress": 0.7}),
        })
        repo.save_project(updated, source="manual")

        loaded = repo.get_project(saved_project.id)
        assert loaded.name == "Apollo v2"
        assert len(loaded.goals) == 1
        assert loaded.state.progress == 0.7
        history = repo.get_state_history(saved_project.id)
        assert [h["state"]["progress"] for h in history] == [0.4, 0.7]
        assert len(repo.get_projects()) == 1

    def test_projects_by_tenant(self, repo, saved_project):
        assert [p["name"] for p in repo.get_projects("acme")] == ["Apollo"]
        assert repo.get_projects("globex") == []
        assert [t["id"] for t in repo.get_tenants()] == ["acme"]

    def test_other_tenant_cannot_overwrite(self, repo, saved_project):
        hijack = saved_project.model_copy(update={"tenant_id": "globex", "name": "Globex secret"})
        with pytest.raises(ProjectConflictError, match="belongs to another tenant"):
            repo.save_project(hijack, source="jira")

        loaded = repo.get_project(saved_project.id)
        assert loaded.tenant_id == "acme"
        assert loaded.name == "Apollo"
        assert len(loaded.goals) == 2
        assert len(repo.get_state_history(saved_project.id)) == 1
        assert [t["id"] for t in repo.get_tenants()] == ["acme"]

    def test_goal_ids_scoped_to_project(self, repo, saved_project):
        other_id = "9d8c7b6a-5f4e-4d3c-8b2a-1f0e9d8c7b6a"
        hermes = Project(
            id=other_id,
            tenant_id="acme",
            name="Hermes",
            goals=[ProjectGoal(id="goal-1", project_id=other_id, title="Project completion")],
            state=ProjectState(project_id=other_id),
        )
        repo.save_project(hermes)
        assert [g.id for g in repo.get_project(other_id).goals] == ["goal-1"]
        assert [g.id for g in repo.get_project(saved_project.id).goals] == ["goal-1", "goal-2"]

    def test_duplicate_goal_ids_rejected(self, repo, saved_project):
        goals = [saved_project.goals[0], saved_project.goals[0]]
        with pytest.raises(DataValidationError, match="cannot be stored"):
            repo.save_project(saved_project.model_copy(update={"goals": goals}))
        assert len(repo.get_project(saved_project.id).goals) == 2


class TestGaps:
    def test_round_trip_with_children(self, repo, saved_project, detailed_gap):
        repo.save_gap(detailed_gap, "acme")
        [loaded] = repo.get_gaps(saved_project.id)
        assert loaded.id == detailed_gap.id
        assert loaded.type == GapType.QUALITY
        assert loaded.variance == 0.6
        assert [rc.description for rc in loaded.root_causes] == [
            rc.description for rc in detailed_gap.root_causes
        ]
        assert loaded.root_causes[0].evidence == ["Three escaped defects last sprint"]
        assert loaded.affected_areas[0].owner == "dana"
        assert loaded.estimated_impact == detailed_gap.estimated_impact
        assert loaded.tags == ["quality", "billing"]
        assert loaded.identified_at == detailed_gap.identified_at

    def test_string_values_survive(self, repo, saved_project, make_gap):
        repo.save_gap(make_gap(current_value="manual", target_value=5), "acme")
        [loaded] = repo.get_gaps(saved_project.id)
        assert loaded.current_value == "manual"
        assert loaded.target_value == 5

    def test_filters(self, repo, saved_project, sample_gaps, detailed_gap):
        repo.save_gaps([*sample_gaps, detailed_gap], "acme")
        pid = saved_project.id
        assert len(repo.get_gaps(pid)) == 4
        assert len(repo.get_gaps(pid, gap_type="resource")) == 2
        assert len(repo.get_gaps(pid, severity="critical")) == 1
        assert len(repo.get_gaps(pid, status="open")) == 4
        assert len(repo.get_gaps(pid, min_confidence=0.8)) == 3
        assert len(repo.get_gaps(pid, max_confidence=0.6)) == 1
        assert [g.id for g in repo.get_gaps(pid, tags=["billing", "missing"])] == [detailed_gap.id]

    def test_invalid_filter_raises(self, repo, saved_project):
        with pytest.raises(DataValidationError, match="severity"):
            repo.get_gaps(saved_project.id, severity="extreme")
        with pytest.raises(DataValidationError, match="min_confidence"):
            repo.get_gaps(saved_project.id, min_confidence=0.9, max_confidence=0.1)

    def test_existing_gap_id_rejected_atomically(self, repo, saved_project, detailed_gap, make_gap):
        repo.save_gap(detailed_gap, "acme")
        with pytest.raises(DataValidationError, match=f"gap {detailed_gap.id} cannot be stored"):
            repo.save_gaps([make_gap(), detailed_gap], "acme")
        assert [g.id for g in repo.get_gaps(saved_project.id)] == [detailed_gap.id]

    def test_gap_for_unknown_project(self, repo, make_gap):
        with pytest.raises(DataValidationError):
            repo.save_gap(make_gap(project_id="missing"), "acme")

    def test_count_by_type(self, repo, saved_project, sample_gaps):
        repo.save_gaps(sample_gaps, "acme")
        counts = repo.count_gaps_by_type(saved_project.id)
        assert list(counts) == list(GapType)
        assert counts[GapType.RESOURCE] == 2
        assert counts[GapType.PROCESS] == 1
        assert counts[GapType.SKILL] == 0


class TestAnalysisRuns:
    def test_save_and_load_run(self, repo, saved_project):
        result = GapAnalysisEngine().analyze(saved_project)
        run_id = repo.save_analysis_run(result, "acme")

        latest = repo.get_latest_run(saved_project.id)
        assert latest["id"] == run_id
        assert latest["total_gaps"] == result.summary.total_gaps
        assert latest["summary"]["critical_gaps"] == result.summary.critical_gaps
        assert len(latest["recommendations"]) == len(result.prioritized_recommendations)

        stored = repo.get_gaps(saved_project.id, run_id=run_id)
        assert sorted(g.id for g in stored) == sorted(g.id for g in result.all_gaps)
        assert repo.count_gaps_by_type(saved_project.id, run_id)[GapType.RESOURCE] == 1

    def test_latest_run_wins(self, repo, saved_project):
        engine = GapAnalysisEngine()
        repo.save_analysis_run(engine.analyze(saved_project), "acme")
        second = repo.save_analysis_run(engine.analyze(saved_project), "acme")
        assert repo.get_latest_run(saved_project.id)["id"] == second
        assert len(repo.get_analysis_runs(saved_project.id)) == 2

    def test_no_runs(self, repo, saved_project):
        assert repo.get_latest_run(saved_project.id) is None

    def test_stored_severities_preserved(self, repo, saved_project):
        result = GapAnalysisEngine().analyze(saved_project)
        run_id = repo.save_analysis_run(result, "acme")
        stored = repo.get_gaps(saved_project.id, run_id=run_id, severity="critical")
        assert {g.type for g in stored} == {GapType.RESOURCE, GapType.QUALITY}
        assert all(g.severity == SeverityLevel.CRITICAL for g in stored)
