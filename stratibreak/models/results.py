"""Analysis output models."""

from datetime import datetime

from pydantic import BaseModel, Field

from stratibreak.models.enums import (
    GapType,
    OverallSeverity,
    Priority,
    RootCauseCategory,
    SeverityLevel,
    TrendDirection,
)
from stratibreak.models.gap import Gap

CategorizedGaps = dict[GapType, list[Gap]]


class GapCategoryMetrics(BaseModel):
    total_count: int
    by_severity: dict[str, int]
    average_confidence: float
    primary_root_cause: RootCauseCategory
    trend: TrendDirection = TrendDirection.STABLE


class AnalysisSummary(BaseModel):
    total_gaps: int
    critical_gaps: int
    high_priority_gaps: int
    average_confidence: float
    most_affected_category: GapType
    least_affected_category: GapType


class Recommendation(BaseModel):
    id: str
    gap_id: str
    title: str
    description: str
    priority: Priority
    estimated_effort: float  # hours
    estimated_impact: float = Field(ge=0, le=1)
    required_resources: list[str] = Field(default_factory=list)
    timeline: str
    dependencies: list[str] = Field(default_factory=list)


class GapAnalysisResult(BaseModel):
    project_id: str
    analysis_timestamp: datetime
    identified_gaps: CategorizedGaps
    category_metrics: dict[GapType, GapCategoryMetrics]
    summary: AnalysisSummary
    overall_health_score: float
    prioritized_recommendations: list[Recommendation] = Field(default_factory=list)
    execution_time_ms: float = 0.0
    confidence: float

    @property
    def all_gaps(self) -> list[Gap]:
        return [gap for bucket in self.identified_gaps.values() for gap in bucket]


class SeverityDistribution(BaseModel):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0


class SeverityMetrics(BaseModel):
    average_severity_score: float
    weighted_severity_score: float
    severity_volatility: float
    escalation_probability: float
    dominant_severity: SeverityLevel
    calculation_confidence: float


class SeverityTrend(BaseModel):
    severity: SeverityLevel
    current_count: int
    previous_count: int
    change_percentage: float
    trend: TrendDirection


class SeverityRecommendation(BaseModel):
    id: str
    target_severity: SeverityLevel
    action: str
    priority: Priority
    expected_impact: str
    estimated_effort: str
    timeline: str


class SeverityAnalysis(BaseModel):
    project_id: str
    analysis_timestamp: datetime
    distribution: SeverityDistribution
    metrics: SeverityMetrics
    gaps_by_severity: dict[SeverityLevel, list[Gap]]
    trends: list[SeverityTrend]
    recommendations: list[SeverityRecommendation]
    overall_assessment: OverallSeverity
    analysis_confidence: float
    execution_time_ms: float = 0.0
