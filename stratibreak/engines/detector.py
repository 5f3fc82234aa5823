"""Gap detection: compares a project's goals and state against targets.

Two sources of gaps:
  - goal gaps, one per goal whose current value is far enough from its target
  - system gaps, raised from state thresholds (delays, utilization, defects)
"""

import logging
import math

from stratibreak.config import Settings, get_settings
from stratibreak.models.enums import (
    CriticalityLevel,
    GapCategory,
    GapType,
    ImpactLevel,
    ImpactType,
    RootCauseCategory,
    SeverityLevel,
    Timeframe,
)
from stratibreak.models.gap import CATEGORY_BY_TYPE, Gap, Impact, ProjectArea, RootCause
from stratibreak.models.project import Project, ProjectGoal, ProjectState

logger = logging.getLogger(__name__)

DEFAULT_TARGET = 1.0

# (title keywords, state field) checked in order; no match reads overall progress
_VALUE_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("progress", "completion"), "progress"),
    (("quality", "defect"), "defect_rate"),
    (("resource", "utilization"), "utilization"),
    (("timeline", "schedule"), "timeline_progress"),
    (("health", "score"), "health_score"),
]

_TYPE_KEYWORDS: list[tuple[tuple[str, ...], GapType]] = [
    (("resource", "staff"), GapType.RESOURCE),
    (("process", "workflow"), GapType.PROCESS),
    (("communication",), GapType.COMMUNICATION),
    (("technology", "tech"), GapType.TECHNOLOGY),
    (("timeline", "schedule"), GapType.TIMELINE),
    (("quality",), GapType.QUALITY),
    (("budget", "cost"), GapType.BUDGET),
    (("skill", "training"), GapType.SKILL),
]

GOAL_GAP_CONFIDENCE = 0.8
GOAL_GAP_TAG = "goal"
SYSTEM_GAP_TAG = "system"


def calculate_variance(current: float, target: float) -> float:
    """Relative distance of current from target. A zero target yields 0 or 1."""
    if target == 0:
        return 0.0 if current == 0 else 1.0
    return (current - target) / target


def infer_gap_type(title: str) -> GapType:
    lowered = title.lower()
    for keywords, gap_type in _TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return gap_type
    return GapType.PROCESS


def extract_target_value(goal: ProjectGoal) -> float:
    """Numeric target of a goal: a number, a numeric string, or a value/target mapping."""
    target = goal.target_value
    if isinstance(target, dict):
        for key in ("value", "target"):
            candidate = target.get(key)
            if isinstance(candidate, (int, float)) and not isinstance(candidate, bool):
                if _is_usable_target(candidate):
                    return float(candidate)
        return DEFAULT_TARGET
    if isinstance(target, (int, float)):
        return float(target) if math.isfinite(target) else DEFAULT_TARGET
    try:
        value = float(target)
    except ValueError:
        return DEFAULT_TARGET
    return value if _is_usable_target(value) else DEFAULT_TARGET


def _is_usable_target(value: float) -> bool:
    # zero, nan and inf all fall back to the default
    return math.isfinite(value) and value != 0


def extract_current_value(state: ProjectState, goal: ProjectGoal) -> float:
    """Current value for a goal, read from the state field its title points at."""
    current = goal.current_value
    if isinstance(current, (int, float)) and not isinstance(current, bool) and math.isfinite(current):
        return float(current)

    values = {
        "progress": state.progress,
        "defect_rate": state.quality.defect_rate,
        "utilization": state.resources.utilization,
        "timeline_progress": state.timeline.progress,
        "health_score": state.health_score,
    }
    title = goal.title.lower()
    for keywords, field in _VALUE_KEYWORDS:
        if any(keyword in title for keyword in keywords):
            return values[field]
    return state.progress


class GapDetector:
    """Finds goal and system gaps in a project snapshot."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def detect(self, project: Project) -> list[Gap]:
        gaps: list[Gap] = []
        for goal in project.goals:
            gap = self.goal_gap(project, goal)
            if gap is not None:
                gaps.append(gap)
        gaps.extend(self.system_gaps(project.id, project.state))
        logger.debug("Detected %d gaps for project %s", len(gaps), project.id)
        return gaps

    def goal_gap(self, project: Project, goal: ProjectGoal) -> Gap | None:
        current = extract_current_value(project.state, goal)
        target = extract_target_value(goal)
        variance = calculate_variance(current, target)

        if abs(variance) < self.settings.variance_threshold:
            return None

        gap_type = infer_gap_type(goal.title)
        return Gap(
            project_id=project.id,
            type=gap_type,
            category=CATEGORY_BY_TYPE[gap_type],
            # placeholder until the analysis engine scores it
            severity=SeverityLevel.MEDIUM,
            title=f"Gap in {goal.title}",
            description=f"Current performance does not meet target for {goal.title}",
            current_value=current,
            target_value=target,
            variance=variance,
            root_causes=[
                RootCause(
                    category=RootCauseCategory.PROCESS,
                    description=f"Insufficient planning for {goal.title}",
                    confidence=0.7,
                    evidence=["Goal variance analysis"],
                    contribution_weight=0.8,
                )
            ],
            affected_areas=[
                ProjectArea(
                    name=goal.title,
                    description=f"Area affected by {goal.title} gap",
                    criticality=CriticalityLevel.MEDIUM,
                )
            ],
            estimated_impact=Impact(
                type=ImpactType.TIMELINE,
                level=ImpactLevel.HIGH if abs(variance) > 0.3 else ImpactLevel.MEDIUM,
                description=f"Impact on {goal.title} achievement",
                timeframe=Timeframe.SHORT_TERM,
                affected_stakeholders=["project-manager"],
            ),
            confidence=GOAL_GAP_CONFIDENCE,
            tags=[GOAL_GAP_TAG],
        )

    def system_gaps(self, project_id: str, state: ProjectState) -> list[Gap]:
        gaps: list[Gap] = []

        delays = state.timeline.delays
        if delays > 0:
            gaps.append(self._system_gap(
                project_id,
                gap_type=GapType.TIMELINE,
                category=GapCategory.OPERATIONAL,
                severity=SeverityLevel.HIGH if delays > 7 else SeverityLevel.MEDIUM,
                title="Timeline Delay Detected",
                description=f"Project is delayed by {delays} days",
                current=delays,
                target=0,
                confidence=0.9,
                impact_type=ImpactType.TIMELINE,
                impact_description="Project delivery delays",
            ))

        utilization = state.resources.utilization
        if utilization > self.settings.utilization_threshold:
            gaps.append(self._system_gap(
                project_id,
                gap_type=GapType.RESOURCE,
                category=GapCategory.OPERATIONAL,
                severity=SeverityLevel.CRITICAL if utilization > 0.95 else SeverityLevel.HIGH,
                title="Resource Over-utilization",
                description=f"Resources are over-utilized at {utilization * 100:.1f}%",
                current=utilization,
                target=0.8,
                confidence=0.85,
                impact_type=ImpactType.TEAM_MORALE,
                impact_description="Team burnout risk",
            ))

        defect_rate = state.quality.defect_rate
        if defect_rate > self.settings.defect_rate_threshold:
            gaps.append(self._system_gap(
                project_id,
                gap_type=GapType.QUALITY,
                category=GapCategory.TECHNICAL,
                severity=SeverityLevel.CRITICAL if defect_rate > 0.1 else SeverityLevel.HIGH,
                title="Quality Issues Detected",
                description=(
                    f"Defect rate is {defect_rate * 100:.1f}% above acceptable threshold"
                ),
                current=defect_rate,
                target=0.02,
                confidence=0.8,
                impact_type=ImpactType.QUALITY,
                impact_description="Product quality concerns",
            ))

        return gaps

    @staticmethod
    def _system_gap(
        project_id: str,
        *,
        gap_type: GapType,
        category: GapCategory,
        severity: SeverityLevel,
        title: str,
        description: str,
        current: float,
        target: float,
        confidence: float,
        impact_type: ImpactType,
        impact_description: str,
    ) -> Gap:
        if severity == SeverityLevel.CRITICAL:
            level, timeframe = ImpactLevel.SEVERE, Timeframe.IMMEDIATE
        elif severity == SeverityLevel.HIGH:
            level, timeframe = ImpactLevel.HIGH, Timeframe.SHORT_TERM
        else:
            level, timeframe = ImpactLevel.MEDIUM, Timeframe.SHORT_TERM

        return Gap(
            project_id=project_id,
            type=gap_type,
            category=category,
            severity=severity,
            title=title,
            description=description,
            current_value=current,
            target_value=target,
            variance=calculate_variance(current, target),
            estimated_impact=Impact(
                type=impact_type,
                level=level,
                description=impact_description,
                timeframe=timeframe,
            ),
            confidence=confidence,
            tags=[SYSTEM_GAP_TAG],
        )
