"""Data models for Stratibreak."""

from stratibreak.models.enums import (
    CriticalityLevel,
    GapCategory,
    GapStatus,
    GapType,
    ImpactLevel,
    ImpactType,
    OverallSeverity,
    Priority,
    ProjectStatus,
    RiskLevel,
    RootCauseCategory,
    SeverityLevel,
    Timeframe,
    TrendDirection,
)
from stratibreak.models.gap import CATEGORY_BY_TYPE, Gap, Impact, ProjectArea, RootCause
from stratibreak.models.project import (
    BudgetState,
    Project,
    ProjectGoal,
    ProjectState,
    QualityState,
    ResourceState,
    RiskState,
    TeamState,
    TimelineState,
)
from stratibreak.models.results import (
    AnalysisSummary,
    CategorizedGaps,
    GapAnalysisResult,
    GapCategoryMetrics,
    Recommendation,
    SeverityAnalysis,
    SeverityDistribution,
    SeverityMetrics,
    SeverityRecommendation,
    SeverityTrend,
)

__all__ = [
    "AnalysisSummary",
    "BudgetState",
    "CATEGORY_BY_TYPE",
    "CategorizedGaps",
    "CriticalityLevel",
    "Gap",
    "GapAnalysisResult",
    "GapCategory",
    "GapCategoryMetrics",
    "GapStatus",
    "GapType",
    "Impact",
    "ImpactLevel",
    "ImpactType",
    "OverallSeverity",
    "Priority",
    "Project",
    "ProjectArea",
    "ProjectGoal",
    "ProjectState",
    "ProjectStatus",
    "QualityState",
    "Recommendation",
    "ResourceState",
    "RiskLevel",
    "RiskState",
    "RootCause",
    "RootCauseCategory",
    "SeverityAnalysis",
    "SeverityDistribution",
    "SeverityLevel",
    "SeverityMetrics",
    "SeverityRecommendation",
    "SeverityTrend",
    "TeamState",
    "TimelineState",
    "Timeframe",
    "TrendDirection",
]
