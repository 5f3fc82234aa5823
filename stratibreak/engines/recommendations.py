"""Recommendation engine: one remediation action per gap, most urgent first."""

from stratibreak.models.enums import GapType, Priority, SeverityLevel
from stratibreak.models.gap import Gap
from stratibreak.models.results import Recommendation

PRIORITY_BY_SEVERITY: dict[SeverityLevel, Priority] = {
    SeverityLevel.CRITICAL: Priority.URGENT,
    SeverityLevel.HIGH: Priority.HIGH,
    SeverityLevel.MEDIUM: Priority.MEDIUM,
    SeverityLevel.LOW: Priority.LOW,
}

PRIORITY_ORDER: dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}

BASE_EFFORT_HOURS: dict[SeverityLevel, float] = {
    SeverityLevel.CRITICAL: 40,
    SeverityLevel.HIGH: 24,
    SeverityLevel.MEDIUM: 16,
    SeverityLevel.LOW: 8,
}

TIMELINE_BY_SEVERITY: dict[SeverityLevel, str] = {
    SeverityLevel.CRITICAL: "1-2 weeks",
    SeverityLevel.HIGH: "2-4 weeks",
    SeverityLevel.MEDIUM: "1-2 months",
    SeverityLevel.LOW: "2-3 months",
}

EXTRA_RESOURCES: dict[GapType, list[str]] = {
    GapType.RESOURCE: ["HR Manager", "Additional Team Members"],
    GapType.TECHNOLOGY: ["Technical Lead", "DevOps Engineer"],
    GapType.QUALITY: ["QA Lead", "Testing Resources"],
    GapType.COMMUNICATION: ["Communication Specialist", "Stakeholder Manager"],
}
DEFAULT_EXTRA_RESOURCES = ["Subject Matter Expert"]

DESCRIPTIONS: dict[GapType, str] = {
    GapType.RESOURCE: (
        "Allocate additional resources or optimize current resource utilization for {title}"
    ),
    GapType.TIMELINE: (
        "Implement timeline recovery strategies and improve scheduling for {title}"
    ),
    GapType.QUALITY: (
        "Enhance quality assurance processes and implement additional testing for {title}"
    ),
    GapType.COMMUNICATION: (
        "Improve communication channels and establish regular check-ins for {title}"
    ),
}
DEFAULT_DESCRIPTION = "Implement corrective measures to address {title}"

COMPLEX_ROOT_CAUSE_COUNT = 2
COMPLEXITY_MULTIPLIER = 1.5


class RecommendationEngine:
    """Builds prioritized recommendations from scored gaps."""

    def generate(self, gaps: list[Gap]) -> list[Recommendation]:
        recommendations = [
            self.recommend(gap, index) for index, gap in enumerate(gaps, start=1)
        ]
        # sorted() is stable: equal priorities keep gap order
        return sorted(recommendations, key=lambda rec: PRIORITY_ORDER[rec.priority])

    def recommend(self, gap: Gap, index: int = 1) -> Recommendation:
        return Recommendation(
            id=f"rec-{index}",
            gap_id=gap.id,
            title=f"Address {gap.title}",
            description=self.describe(gap),
            priority=PRIORITY_BY_SEVERITY[gap.severity],
            estimated_effort=self.estimate_effort(gap),
            estimated_impact=gap.confidence_or_default,
            required_resources=self.required_resources(gap),
            timeline=TIMELINE_BY_SEVERITY[gap.severity],
        )

    @staticmethod
    def describe(gap: Gap) -> str:
        template = DESCRIPTIONS.get(gap.type, DEFAULT_DESCRIPTION)
        return template.format(title=gap.title)

    @staticmethod
    def estimate_effort(gap: Gap) -> float:
        """Hours of work, half again as much for gaps with several root causes."""
        effort = BASE_EFFORT_HOURS[gap.severity]
        if len(gap.root_causes) > COMPLEX_ROOT_CAUSE_COUNT:
            effort *= COMPLEXITY_MULTIPLIER
        return effort

    @staticmethod
    def required_resources(gap: Gap) -> list[str]:
        return ["Project Manager", *EXTRA_RESOURCES.get(gap.type, DEFAULT_EXTRA_RESOURCES)]
