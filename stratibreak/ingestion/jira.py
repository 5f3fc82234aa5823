"""Jira adapter: builds project snapshots from a Jira issue search export.

Accepts the JSON returned by ``/rest/api/3/search`` (an object with an
``issues`` list) or a bare list of issues. Issues are grouped by project key
and each group becomes one Project whose state is derived from the issues.
"""

import json
import logging
from collections import defaultdict
from datetime import date, datetime
from pathlib import Path
from uuid import NAMESPACE_URL, uuid5

from stratibreak.exceptions import IngestionError
from stratibreak.ingestion.base import BaseAdapter, ImportResult
from stratibreak.models.project import (
    Project,
    ProjectState,
    QualityState,
    ResourceState,
    TeamState,
    TimelineState,
)

logger = logging.getLogger(__name__)

DONE_CATEGORY = "done"
IN_PROGRESS_CATEGORY = "indeterminate"
BUG_TYPES = {"bug", "defect"}


def project_uuid(project_key: str, tenant_id: str) -> str:
    """Stable per-tenant project ID, so re-importing an export updates the same project."""
    return str(uuid5(NAMESPACE_URL, f"jira:{tenant_id}:{project_key}"))


def _status_category(issue: dict) -> str:
    return (
        issue.get("fields", {}).get("status", {}).get("statusCategory", {}).get("key", "")
    )


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        # Jira timestamps look like 2024-01-15T10:30:00.000+0000
        return date.fromisoformat(value[:10])


class JiraAdapter(BaseAdapter):
    """Converts Jira issues into project snapshots."""

    source = "jira"

    def __init__(self, as_of: date | None = None):
        self.as_of = as_of or date.today()

    def parse(self, file_path: Path, tenant_id: str) -> ImportResult:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            raw = json.loads(file_path.read_text())
        except json.JSONDecodeError as e:
            raise IngestionError(str(file_path), f"invalid JSON: {e}") from e

        issues = raw.get("issues") if isinstance(raw, dict) else raw
        if not isinstance(issues, list) or not issues:
            raise IngestionError(str(file_path), "no Jira issues found")
        if not self.is_jira_export(raw):
            raise IngestionError(str(file_path), "records are not Jira issues")

        try:
            return self._build_result(issues, tenant_id)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise IngestionError(str(file_path), f"malformed Jira issue: {e}") from e

    def _build_result(self, issues: list[dict], tenant_id: str) -> ImportResult:
        by_project: dict[str, list[dict]] = defaultdict(list)
        project_names: dict[str, str] = {}
        for issue in issues:
            project = issue["fields"].get("project") or {}
            key = project.get("key") or issue.get("key", "UNKNOWN").split("-")[0]
            by_project[key].append(issue)
            project_names.setdefault(key, project.get("name") or key)

        result = ImportResult(source=self.source)
        for key, project_issues in by_project.items():
            project_id = project_uuid(key, tenant_id)
            result.projects.append(Project(
                id=project_id,
                tenant_id=tenant_id,
                name=project_names[key],
                description=f"Imported from Jira project {key}",
                state=self.build_state(project_id, project_issues),
            ))
            logger.debug("Jira project %s: %d issues", key, len(project_issues))
        return result

    def validate(self, data: ImportResult) -> list[str]:
        errors: list[str] = []
        for project in data.projects:
            if project.state.progress > 1:
                errors.append(f"Project '{project.name}': progress above 100%")
        return errors

    @staticmethod
    def is_jira_export(raw: dict | list) -> bool:
        issues = raw.get("issues") if isinstance(raw, dict) else raw
        if not isinstance(issues, list) or not issues:
            return False
        sample = issues[0]
        return isinstance(sample, dict) and "key" in sample and "fields" in sample

    def build_state(self, project_id: str, issues: list[dict]) -> ProjectState:
        """Derive progress, quality, team and delay figures from the issue set."""
        total = len(issues)
        done = [i for i in issues if _status_category(i) == DONE_CATEGORY]
        open_issues = [i for i in issues if _status_category(i) != DONE_CATEGORY]
        in_progress = [i for i in issues if _status_category(i) == IN_PROGRESS_CATEGORY]
        open_bugs = [
            i for i in open_issues
            if i["fields"].get("issuetype", {}).get("name", "").lower() in BUG_TYPES
        ]

        assignees = {
            i["fields"]["assignee"].get("accountId") or i["fields"]["assignee"].get("displayName")
            for i in issues
            if i["fields"].get("assignee")
        }
        active = {
            i["fields"]["assignee"].get("accountId") or i["fields"]["assignee"].get("displayName")
            for i in in_progress
            if i["fields"].get("assignee")
        }

        delays = 0
        for issue in open_issues:
            due = _parse_date(issue["fields"].get("duedate"))
            if due and due < self.as_of:
                delays = max(delays, (self.as_of - due).days)

        created = [_parse_date(i["fields"].get("created")) for i in issues]
        due_dates = [_parse_date(i["fields"].get("duedate")) for i in issues]
        start = min((d for d in created if d), default=None)
        end = max((d for d in due_dates if d), default=None)
        if start and end and end <= start:
            end = None

        progress = len(done) / total if total else 0.0
        team = TeamState(
            total_members=len(assignees),
            active_members=len(active),
            workload=len(in_progress) / len(assignees) if assignees else 0.0,
        )
        return ProjectState(
            project_id=project_id,
            progress=progress,
            resources=ResourceState(team=team),
            timeline=TimelineState(
                start_date=start, end_date=end, progress=progress, delays=delays
            ),
            quality=QualityState(defect_rate=len(open_bugs) / total if total else 0.0),
        )
