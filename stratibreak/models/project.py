"""Project, goal and project-state models.

Defaults mirror what the analyzer assumes when a snapshot omits a metric, so
a partially filled import still produces a complete state.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from stratibreak.models.enums import ProjectStatus, RiskLevel


class BudgetState(BaseModel):
    allocated: float = 100000.0
    spent: float = 50000.0
    remaining: float = 50000.0
    burn_rate: float = 5000.0


class TeamState(BaseModel):
    total_members: int = 8
    active_members: int = 7
    capacity: float = 0.8
    workload: float = 0.75


class ResourceState(BaseModel):
    utilization: float = Field(default=0.7, ge=0)
    available: int = 10
    allocated: int = 8
    budget: BudgetState = Field(default_factory=BudgetState)
    team: TeamState = Field(default_factory=TeamState)


class TimelineState(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    progress: float = 0.6
    delays: int = Field(default=0, ge=0)  # days behind schedule


class QualityState(BaseModel):
    current_score: float = 75.0
    defect_rate: float = Field(default=0.05, ge=0)
    test_coverage: float = 0.8
    code_quality: float = 80.0
    customer_satisfaction: float | None = 4.2


class RiskState(BaseModel):
    overall_risk: RiskLevel = RiskLevel.MEDIUM
    active_risks: int = 2
    mitigated_risks: int = 1


class ProjectState(BaseModel):
    project_id: str
    progress: float = Field(default=0.0, ge=0)
    health_score: float = 50.0
    resources: ResourceState = Field(default_factory=ResourceState)
    timeline: TimelineState = Field(default_factory=TimelineState)
    quality: QualityState = Field(default_factory=QualityState)
    risks: RiskState = Field(default_factory=RiskState)


class ProjectGoal(BaseModel):
    id: str
    project_id: str
    title: str
    description: str = ""
    # A number, a numeric string, or a mapping carrying "value" / "target"
    target_value: float | str | dict[str, Any] = 1.0
    current_value: float | str | None = None
    due_date: date | None = None


class Project(BaseModel):
    id: str
    tenant_id: str
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    goals: list[ProjectGoal] = Field(default_factory=list)
    state: ProjectState
