"""Shared test fixtures for Stratibreak."""

from datetime import date

import pytest

from stratibreak.db.repository import GapRepository
from stratibreak.db.schema import create_schema
from stratibreak.models.enums import (
    CriticalityLevel,
    GapType,
    ImpactLevel,
    ImpactType,
    RootCauseCategory,
    SeverityLevel,
)
from stratibreak.models.gap import Gap, Impact, ProjectArea, RootCause
from stratibreak.models.project import (
    Project,
    ProjectGoal,
    ProjectState,
    QualityState,
    ResourceState,
    TimelineState,
)

PROJECT_ID = "3f2b8c1e-5d4a-4b6e-9c7d-1a2b3c4d5e6f"


@pytest.fixture
def project_id() -> str:
    return PROJECT_ID


@pytest.fixture
def make_gap():
    """Factory for gaps with sensible defaults; keyword arguments override fields."""

    def _make(**overrides) -> Gap:
        fields = {
            "project_id": PROJECT_ID,
            "type": GapType.RESOURCE,
            "severity": SeverityLevel.MEDIUM,
            "title": "Resource shortfall",
            "description": "Team capacity is below plan",
            "current_value": 5,
            "target_value": 8,
            "variance": -0.375,
            "confidence": 0.8,
        }
        fields.update(overrides)
        return Gap(**fields)

    return _make


@pytest.fixture
def sample_gaps(make_gap) -> list[Gap]:
    """Two resource gaps and one process gap."""
    return [
        make_gap(type=GapType.RESOURCE, severity=SeverityLevel.HIGH, confidence=0.8),
        make_gap(type=GapType.RESOURCE, severity=SeverityLevel.LOW, confidence=0.6),
        make_gap(
            type=GapType.PROCESS,
            severity=SeverityLevel.CRITICAL,
            confidence=0.9,
            title="Release process breaks down",
        ),
    ]


@pytest.fixture
def detailed_gap(make_gap) -> Gap:
    return make_gap(
        type=GapType.QUALITY,
        severity=SeverityLevel.HIGH,
        title="Defect backlog growing",
        variance=0.6,
        root_causes=[
            RootCause(
                category=RootCauseCategory.PROCESS,
                description="No regression suite for the billing module",
                confidence=0.7,
                evidence=["Three escaped defects last sprint"],
                contribution_weight=0.6,
            ),
            RootCause(
                category=RootCauseCategory.PEOPLE,
                description="QA engineer moved to another team",
                confidence=0.5,
                contribution_weight=0.4,
            ),
        ],
        affected_areas=[
            ProjectArea(name="Billing", criticality=CriticalityLevel.HIGH, owner="dana"),
        ],
        estimated_impact=Impact(
            type=ImpactType.QUALITY,
            level=ImpactLevel.HIGH,
            description="Customers hit billing errors",
            timeframe="immediate",
            affected_stakeholders=["product-owner", "support-lead"],
        ),
        tags=["quality", "billing"],
    )


@pytest.fixture
def healthy_state() -> ProjectState:
    return ProjectState(
        project_id=PROJECT_ID,
        progress=0.6,
        health_score=80.0,
        resources=ResourceState(utilization=0.7),
        timeline=TimelineState(progress=0.6, delays=0),
        quality=QualityState(defect_rate=0.02),
    )


@pytest.fixture
def troubled_state() -> ProjectState:
    """Delayed, over-utilized and buggy."""
    return ProjectState(
        project_id=PROJECT_ID,
        progress=0.4,
        health_score=45.0,
        resources=ResourceState(utilization=0.97),
        timeline=TimelineState(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 6, 30),
            progress=0.4,
            delays=10,
        ),
        quality=QualityState(defect_rate=0.12),
    )


@pytest.fixture
def sample_project(troubled_state: ProjectState) -> Project:
    return Project(
        id=PROJECT_ID,
        tenant_id="acme",
        name="Apollo",
        description="Customer portal rebuild",
        goals=[
            ProjectGoal(
                id="goal-1",
                project_id=PROJECT_ID,
                title="Project completion",
                target_value=0.8,
            ),
            ProjectGoal(
                id="goal-2",
                project_id=PROJECT_ID,
                title="Quality score",
                target_value={"value": 90},
                current_value=88,
            ),
        ],
        state=troubled_state,
    )


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "test.db"
    conn = create_schema(db_path)
    yield conn
    conn.close()


@pytest.fixture
def repo(db_conn):
    return GapRepository(db_conn)
