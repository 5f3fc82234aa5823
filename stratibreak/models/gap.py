"""Gap entity models: a gap, its root causes, affected areas and impact."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from stratibreak.models.enums import (
    CriticalityLevel,
    GapCategory,
    GapStatus,
    GapType,
    ImpactLevel,
    ImpactType,
    Priority,
    RootCauseCategory,
    SeverityLevel,
)

CATEGORY_BY_TYPE: dict[GapType, GapCategory] = {
    GapType.RESOURCE: GapCategory.OPERATIONAL,
    GapType.TIMELINE: GapCategory.OPERATIONAL,
    GapType.QUALITY: GapCategory.OPERATIONAL,
    GapType.TECHNOLOGY: GapCategory.TECHNICAL,
    GapType.COMMUNICATION: GapCategory.ORGANIZATIONAL,
    GapType.CULTURE: GapCategory.ORGANIZATIONAL,
    GapType.GOVERNANCE: GapCategory.ORGANIZATIONAL,
    GapType.PROCESS: GapCategory.TACTICAL,
    GapType.BUDGET: GapCategory.TACTICAL,
    GapType.SKILL: GapCategory.TACTICAL,
}


def _new_id() -> str:
    return str(uuid4())


class RootCause(BaseModel):
    id: str = Field(default_factory=_new_id)
    category: RootCauseCategory
    description: str
    confidence: float = Field(ge=0, le=1)
    evidence: list[str] = Field(default_factory=list)
    contribution_weight: float = Field(ge=0, le=1)


class ProjectArea(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    description: str = ""
    owner: str | None = None
    criticality: CriticalityLevel = CriticalityLevel.MEDIUM


class Impact(BaseModel):
    id: str = Field(default_factory=_new_id)
    type: ImpactType
    level: ImpactLevel
    description: str
    quantitative_value: float | None = None
    unit: str | None = None
    timeframe: str = "short-term"  # free text; Timeframe values are scored
    affected_stakeholders: list[str] = Field(default_factory=list)


class Gap(BaseModel):
    """A detected discrepancy between a project's current and target state.

    Gaps are never updated in place: a re-scored gap is a new instance made
    with ``model_copy(update=...)``.
    """

    id: str = Field(default_factory=_new_id)
    project_id: str
    type: GapType
    category: GapCategory | None = None
    severity: SeverityLevel
    title: str
    description: str = ""
    current_value: float | str = 0.0
    target_value: float | str = 0.0
    variance: float = 0.0
    root_causes: list[RootCause] = Field(default_factory=list)
    affected_areas: list[ProjectArea] = Field(default_factory=list)
    estimated_impact: Impact | None = None
    confidence: float | None = Field(default=None, ge=0, le=1)
    status: GapStatus = GapStatus.OPEN
    priority: Priority | None = None
    tags: list[str] = Field(default_factory=list)
    identified_at: datetime = Field(default_factory=datetime.now)

    @property
    def resolved_category(self) -> GapCategory:
        """The stored category, or the one implied by the gap type."""
        if self.category is not None:
            return self.category
        return CATEGORY_BY_TYPE[self.type]

    @property
    def confidence_or_default(self) -> float:
        """Confidence with an unset value counted as 0."""
        return self.confidence if self.confidence is not None else 0.0
