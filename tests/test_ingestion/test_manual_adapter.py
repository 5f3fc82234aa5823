"""Tests for the manual JSON adapter."""

import json
from pathlib import Path

import pytest

from stratibreak.exceptions import IngestionError
from stratibreak.ingestion.manual import ManualAdapter
from stratibreak.models.enums import (
    CriticalityLevel,
    GapStatus,
    GapType,
    ImpactLevel,
    RootCauseCategory,
    SeverityLevel,
)

PROJECT_ID = "3f2b8c1e-5d4a-4b6e-9c7d-1a2b3c4d5e6f"


@pytest.fixture
def adapter() -> ManualAdapter:
    return ManualAdapter()


def _write(tmp_path: Path, data, name: str = "input.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def project_record() -> dict:
    return {
        "id": PROJECT_ID,
        "name": "Apollo",
        "description": "Customer portal rebuild",
        "goals": [
            {"title": "Project completion", "target_value": 0.8},
            {"id": "goal-q", "title": "Quality score", "target_value": {"value": 90},
             "current_value": 88, "due_date": "2024-09-30"},
        ],
        "state": {
            "progress": 0.4,
            "resources": {"utilization": 0.97},
            "timeline": {"start_date": "2024-01-01", "end_date": "2024-06-30", "delays": 10},
        },
    }


@pytest.fixture
def gap_records() -> list[dict]:
    return [
        {
            "project_id": PROJECT_ID,
            "type": "Resource",
            "severity": "HIGH",
            "title": "Backend team understaffed",
            "status": "In Progress",
            "variance": -0.4,
            "confidence": 0.85,
            "root_causes": [{
                "category": "Management",
                "description": "Hiring freeze since Q1",
                "confidence": 0.9,
                "contribution_weight": 0.7,
            }],
            "affected_areas": [{"name": "Payments API"}, {"name": "Billing", "criticality": "High"}],
            "estimated_impact": {"type": "timeline", "level": "Severe", "description": "Launch slips"},
            "tags": ["staffing"],
        },
        {
            "project_id": PROJECT_ID,
            "type": "communication",
            "severity": "low",
            "title": "Status updates irregular",
        },
    ]


class TestParseProjects:
    def test_project_record(self, adapter, tmp_path, project_record):
        result = adapter.parse(_write(tmp_path, project_record), "acme")
        assert result.source == "manual"
        assert result.gaps == []
        assert result.warnings == []
        [project] = result.projects
        assert project.id == PROJECT_ID
        assert project.tenant_id == "acme"
        assert project.state.project_id == PROJECT_ID
        assert project.state.resources.utilization == 0.97
        assert project.state.timeline.delays == 10
        assert project.goals[0].id
        assert project.goals[1].id == "goal-q"
        assert str(project.goals[1].due_date) == "2024-09-30"

    def test_generated_id(self, adapter, tmp_path, project_record):
        del project_record["id"]
        [project] = adapter.parse(_write(tmp_path, project_record), "acme").projects
        assert project.id
        assert all(goal.project_id == project.id for goal in project.goals)

    def test_project_without_goals_warns(self, adapter, tmp_path):
        result = adapter.parse(_write(tmp_path, {"name": "Zeus", "state": {}}), "acme")
        assert result.projects[0].goals == []
        assert "has no goals" in result.warnings[0]

    def test_goal_without_title(self, adapter, tmp_path, project_record):
        project_record["goals"].append({"target_value": 1})
        with pytest.raises(IngestionError, match="missing required field"):
            adapter.parse(_write(tmp_path, project_record), "acme")


class TestParseGaps:
    def test_loose_spelling_is_coerced(self, adapter, tmp_path, gap_records):
        result = adapter.parse(_write(tmp_path, gap_records), "acme")
        assert result.projects == []
        first, second = result.gaps
        assert first.type == GapType.RESOURCE
        assert first.severity == SeverityLevel.HIGH
        assert first.status == GapStatus.IN_PROGRESS
        assert first.root_causes[0].category == RootCauseCategory.MANAGEMENT
        assert first.affected_areas[0].criticality == CriticalityLevel.MEDIUM
        assert first.affected_areas[1].criticality == CriticalityLevel.HIGH
        assert first.estimated_impact.level == ImpactLevel.SEVERE
        assert second.type == GapType.COMMUNICATION

    def test_unknown_type(self, adapter, tmp_path, gap_records):
        gap_records[1]["type"] = "morale"
        with pytest.raises(IngestionError, match="record 1"):
            adapter.parse(_write(tmp_path, gap_records), "acme")

    def test_invalid_field_raises(self, adapter, tmp_path, gap_records):
        gap_records[0]["confidence"] = 4
        with pytest.raises(IngestionError):
            adapter.parse(_write(tmp_path, gap_records), "acme")

    def test_bad_criticality_rejected(self, adapter, tmp_path, gap_records):
        gap_records[0]["affected_areas"][0]["criticality"] = "vital"
        with pytest.raises(IngestionError):
            adapter.parse(_write(tmp_path, gap_records), "acme")


class TestParseErrors:
    def test_missing_file(self, adapter, tmp_path):
        with pytest.raises(FileNotFoundError):
            adapter.parse(tmp_path / "absent.json", "acme")

    def test_invalid_json(self, adapter, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(IngestionError, match="invalid JSON"):
            adapter.parse(path, "acme")

    def test_empty_list(self, adapter, tmp_path):
        with pytest.raises(IngestionError, match="empty list"):
            adapter.parse(_write(tmp_path, []), "acme")

    def test_unrecognized_shape(self, adapter, tmp_path):
        with pytest.raises(IngestionError, match="Cannot detect record kind"):
            adapter.parse(_write(tmp_path, {"foo": 1}), "acme")

    def test_scalar_records(self, adapter, tmp_path):
        with pytest.raises(IngestionError, match="expected a JSON object"):
            adapter.parse(_write(tmp_path, [1, 2]), "acme")


class TestValidate:
    def test_clean_import(self, adapter, tmp_path, project_record, gap_records):
        assert adapter.validate(adapter.parse(_write(tmp_path, project_record), "acme")) == []
        assert adapter.validate(adapter.parse(_write(tmp_path, gap_records), "acme")) == []

    def test_project_problems(self, adapter, tmp_path, project_record):
        project_record["goals"].append({"title": "Project completion"})
        project_record["state"].update(
            progress=1.5,
            health_score=120,
            quality={"defect_rate": 1.2},
            timeline={"start_date": "2024-06-30", "end_date": "2024-01-01"},
        )
        errors = adapter.validate(adapter.parse(_write(tmp_path, project_record), "acme"))
        assert len(errors) == 5
        assert any("progress 1.5" in e for e in errors)
        assert any("health score 120" in e for e in errors)
        assert any("defect rate 1.2" in e for e in errors)
        assert any("starts after it ends" in e for e in errors)
        assert any("duplicate goal 'Project completion'" in e for e in errors)

    def test_gap_problems(self, adapter, tmp_path, gap_records):
        gap_records[0].update(variance=25.0, tags=["bad tag"])
        errors = adapter.validate(adapter.parse(_write(tmp_path, gap_records), "acme"))
        assert len(errors) == 2
        assert "variance 25.0 is out of range" in errors[0]
        assert "invalid tags" in errors[1]
