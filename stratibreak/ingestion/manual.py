"""Manual adapter for hand-written JSON project snapshots and gap lists."""

import json
from pathlib import Path
from uuid import uuid4

from pydantic import ValidationError

from stratibreak.exceptions import IngestionError
from stratibreak.ingestion.base import BaseAdapter, ImportResult
from stratibreak.models.gap import Gap
from stratibreak.models.project import Project, ProjectGoal, ProjectState
from stratibreak.normalization.coerce import (
    to_criticality_level,
    to_gap_category,
    to_gap_status,
    to_gap_type,
    to_impact_level,
    to_priority,
    to_root_cause_category,
    to_severity_level,
)
from stratibreak.validation import predicates as p


class ManualAdapter(BaseAdapter):
    """Imports JSON files describing either projects or already-identified gaps.

    A project record carries ``name`` plus ``goals`` and/or ``state``. A gap
    record carries ``type``, ``severity`` and ``title``. The file may hold one
    record or a list of records of the same kind.
    """

    source = "manual"

    def parse(self, file_path: Path, tenant_id: str) -> ImportResult:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            raw = json.loads(file_path.read_text())
        except json.JSONDecodeError as e:
            raise IngestionError(str(file_path), f"invalid JSON: {e}") from e

        records = raw if isinstance(raw, list) else [raw]
        kind = self._detect_kind(records, file_path)

        dispatch = {
            "project": self._parse_projects,
            "gaps": self._parse_gaps,
        }
        try:
            return dispatch[kind](records, tenant_id)
        except ValidationError as e:
            raise IngestionError(str(file_path), str(e)) from e
        except KeyError as e:
            raise IngestionError(str(file_path), f"missing required field {e}") from e

    def validate(self, data: ImportResult) -> list[str]:
        errors: list[str] = []
        for project in data.projects:
            errors.extend(self._validate_project(project))
        for gap in data.gaps:
            if not p.is_reasonable_variance(gap.variance):
                errors.append(f"Gap '{gap.title}': variance {gap.variance} is out of range")
            if not p.are_valid_tags(gap.tags):
                errors.append(f"Gap '{gap.title}': invalid tags {gap.tags}")
        return errors

    # --- Detection ---

    @staticmethod
    def _detect_kind(records: list, file_path: Path) -> str:
        if not records:
            raise IngestionError(str(file_path), "JSON file contains an empty list")
        sample = records[0]
        if not isinstance(sample, dict):
            raise IngestionError(str(file_path), "expected a JSON object or a list of objects")

        if "type" in sample and "severity" in sample:
            return "gaps"
        if "name" in sample and ("goals" in sample or "state" in sample):
            return "project"
        raise IngestionError(
            str(file_path), f"Cannot detect record kind from JSON keys: {list(sample.keys())}"
        )

    # --- Parsers ---

    def _parse_projects(self, records: list[dict], tenant_id: str) -> ImportResult:
        result = ImportResult(source=self.source)
        for record in records:
            project_id = record.get("id") or str(uuid4())
            state = dict(record.get("state") or {})
            state["project_id"] = project_id
            goals = [
                ProjectGoal(
                    id=goal.get("id") or str(uuid4()),
                    project_id=project_id,
                    title=goal["title"],
                    description=goal.get("description", ""),
                    target_value=goal.get("target_value", 1.0),
                    current_value=goal.get("current_value"),
                    due_date=goal.get("due_date"),
                )
                for goal in record.get("goals", [])
            ]
            result.projects.append(Project(
                id=project_id,
                tenant_id=record.get("tenant_id") or tenant_id,
                name=record["name"],
                description=record.get("description", ""),
                status=record.get("status", "active"),
                goals=goals,
                state=ProjectState.model_validate(state),
            ))
            if not goals:
                result.warnings.append(
                    f"Project '{record['name']}' has no goals; only state thresholds will be checked"
                )
        return result

    def _parse_gaps(self, records: list[dict], tenant_id: str) -> ImportResult:
        result = ImportResult(source=self.source)
        for index, record in enumerate(records):
            gap_type = to_gap_type(record.get("type"))
            severity = to_severity_level(record.get("severity"))
            if gap_type is None or severity is None:
                raise IngestionError(
                    self.source,
                    f"record {index}: unknown type {record.get('type')!r} "
                    f"or severity {record.get('severity')!r}",
                )
            result.gaps.append(Gap.model_validate(self._normalize_gap(record, gap_type, severity)))
        return result

    @staticmethod
    def _normalize_gap(record: dict, gap_type, severity) -> dict:
        """Coerce loosely spelled enum values ("In Progress", "HIGH") to their canonical form."""
        data = dict(record)
        data["type"] = gap_type
        data["severity"] = severity
        for key, coerce in (
            ("category", to_gap_category),
            ("priority", to_priority),
            ("status", to_gap_status),
        ):
            if data.get(key) is not None:
                data[key] = coerce(data[key]) or data[key]

        data["root_causes"] = [
            {**rc, "category": to_root_cause_category(rc.get("category")) or rc.get("category")}
            for rc in data.get("root_causes") or []
        ]
        data["affected_areas"] = [
            {**area, "criticality": to_criticality_level(area.get("criticality"))
             or area.get("criticality", "medium")}
            for area in data.get("affected_areas") or []
        ]
        impact = data.get("estimated_impact")
        if isinstance(impact, dict):
            data["estimated_impact"] = {
                **impact, "level": to_impact_level(impact.get("level")) or impact.get("level")
            }
        return data

    # --- Validators ---

    @staticmethod
    def _validate_project(project: Project) -> list[str]:
        errors: list[str] = []
        if not p.is_not_empty(project.name) or not project.name.strip():
            errors.append(f"Project {project.id}: name is empty")
        state = project.state
        if not p.is_valid_confidence(state.progress):
            errors.append(f"Project '{project.name}': progress {state.progress} is not within 0-1")
        if not p.is_valid_percentage(state.health_score):
            errors.append(
                f"Project '{project.name}': health score {state.health_score} is not within 0-100"
            )
        if not p.is_valid_confidence(state.quality.defect_rate):
            errors.append(
                f"Project '{project.name}': defect rate {state.quality.defect_rate} is not within 0-1"
            )
        timeline = state.timeline
        if timeline.start_date and timeline.end_date and not p.is_valid_date_range(
            timeline.start_date, timeline.end_date
        ):
            errors.append(f"Project '{project.name}': timeline starts after it ends")
        titles = [goal.title for goal in project.goals]
        for title in sorted({t for t in titles if titles.count(t) > 1}):
            errors.append(f"Project '{project.name}': duplicate goal '{title}'")
        return errors
