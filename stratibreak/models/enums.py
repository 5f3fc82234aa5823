"""Enumerations for Stratibreak."""

from enum import StrEnum


class GapType(StrEnum):
    """The dimension a gap belongs to. Declaration order is the bucket order."""

    RESOURCE = "resource"
    PROCESS = "process"
    COMMUNICATION = "communication"
    TECHNOLOGY = "technology"
    CULTURE = "culture"
    TIMELINE = "timeline"
    QUALITY = "quality"
    BUDGET = "budget"
    SKILL = "skill"
    GOVERNANCE = "governance"


class GapCategory(StrEnum):
    OPERATIONAL = "operational"
    STRATEGIC = "strategic"
    TACTICAL = "tactical"
    TECHNICAL = "technical"
    ORGANIZATIONAL = "organizational"


class SeverityLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    SeverityLevel.LOW: 1,
    SeverityLevel.MEDIUM: 2,
    SeverityLevel.HIGH: 3,
    SeverityLevel.CRITICAL: 4,
}


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class GapStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class RootCauseCategory(StrEnum):
    PEOPLE = "people"
    PROCESS = "process"
    TECHNOLOGY = "technology"
    ENVIRONMENT = "environment"
    MANAGEMENT = "management"
    EXTERNAL = "external"


class ImpactType(StrEnum):
    TIMELINE = "timeline"
    BUDGET = "budget"
    QUALITY = "quality"
    SCOPE = "scope"
    TEAM_MORALE = "team_morale"
    CUSTOMER_SATISFACTION = "customer_satisfaction"
    REPUTATION = "reputation"


class ImpactLevel(StrEnum):
    NEGLIGIBLE = "negligible"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    SEVERE = "severe"


class CriticalityLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Timeframe(StrEnum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short-term"
    MEDIUM_TERM = "medium-term"
    LONG_TERM = "long-term"


class TrendDirection(StrEnum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class OverallSeverity(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectStatus(StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
