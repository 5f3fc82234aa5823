"""Tests for goal and system gap detection."""

import pytest

from stratibreak.config import Settings
from stratibreak.engines.detector import (
    GOAL_GAP_TAG,
    SYSTEM_GAP_TAG,
    GapDetector,
    calculate_variance,
    extract_current_value,
    extract_target_value,
    infer_gap_type,
)
from stratibreak.models.enums import (
    GapCategory,
    GapType,
    ImpactLevel,
    ImpactType,
    SeverityLevel,
    Timeframe,
)
from stratibreak.models.project import ProjectGoal, ProjectState, QualityState


def _goal(title="Project completion", target=1.0, current=None) -> ProjectGoal:
    return ProjectGoal(
        id="g1", project_id="p1", title=title, target_value=target, current_value=current
    )


@pytest.fixture
def detector():
    return GapDetector(Settings())


class TestHelpers:
    def test_variance(self):
        assert calculate_variance(0.4, 0.8) == pytest.approx(-0.5)
        assert calculate_variance(12, 10) == pytest.approx(0.2)

    def test_variance_zero_target(self):
        assert calculate_variance(0, 0) == 0.0
        assert calculate_variance(3, 0) == 1.0

    @pytest.mark.parametrize("title,expected", [
        ("Staff retention", GapType.RESOURCE),
        ("Workflow automation", GapType.PROCESS),
        ("Stakeholder communication", GapType.COMMUNICATION),
        ("Tech debt reduction", GapType.TECHNOLOGY),
        ("Schedule adherence", GapType.TIMELINE),
        ("Quality score", GapType.QUALITY),
        ("Cost control", GapType.BUDGET),
        ("Training completion", GapType.SKILL),
        ("Something else", GapType.PROCESS),
    ])
    def test_infer_gap_type(self, title, expected):
        assert infer_gap_type(title) == expected

    @pytest.mark.parametrize("target,expected", [
        (0.75, 0.75),
        ("0.75", 0.75),
        ("not a number", 1.0),
        ({"value": 90}, 90.0),
        ({"target": 5}, 5.0),
        ({"unit": "pct"}, 1.0),
        ("nan", 1.0),
        ("-inf", 1.0),
        ("0", 1.0),
        (float("inf"), 1.0),
        ({"value": float("nan"), "target": 4}, 4.0),
    ])
    def test_extract_target_value(self, target, expected):
        assert extract_target_value(_goal(target=target)) == expected

    def test_extract_current_value_prefers_goal(self, healthy_state):
        assert extract_current_value(healthy_state, _goal(current=42)) == 42.0

    @pytest.mark.parametrize("title,expected", [
        ("Project completion", 0.6),
        ("Defect reduction", 0.02),
        ("Resource utilization", 0.7),
        ("Timeline adherence", 0.6),
        ("Health score", 80.0),
        ("Team morale", 0.6),
    ])
    def test_extract_current_value_from_state(self, healthy_state, title, expected):
        assert extract_current_value(healthy_state, _goal(title=title)) == expected


class TestGoalGaps:
    def test_gap_above_threshold(self, detector, sample_project):
        gap = detector.goal_gap(sample_project, sample_project.goals[0])
        assert gap is not None
        assert gap.title == "Gap in Project completion"
        assert gap.variance == pytest.approx(-0.5)
        assert gap.current_value == 0.4
        assert gap.target_value == 0.8
        assert gap.type == GapType.PROCESS
        assert gap.category == GapCategory.TACTICAL
        assert gap.severity == SeverityLevel.MEDIUM
        assert gap.confidence == 0.8
        assert gap.tags == [GOAL_GAP_TAG]
        assert gap.estimated_impact.level == ImpactLevel.HIGH
        assert len(gap.root_causes) == 1
        assert gap.affected_areas[0].name == "Project completion"

    def test_gap_below_threshold_ignored(self, detector, sample_project):
        assert detector.goal_gap(sample_project, sample_project.goals[1]) is None

    def test_threshold_from_settings(self, sample_project):
        strict = GapDetector(Settings(variance_threshold=0.6))
        assert strict.goal_gap(sample_project, sample_project.goals[0]) is None

    def test_moderate_variance_impact(self, detector, sample_project):
        goal = _goal(title="Project completion", target=0.5)
        gap = detector.goal_gap(sample_project, goal)
        # current progress 0.4 -> variance -0.2
        assert gap.estimated_impact.level == ImpactLevel.MEDIUM

    def test_non_finite_target_uses_default(self, detector, sample_project):
        project = sample_project.model_copy(update={
            "state": sample_project.state.model_copy(update={"progress": 0.5}),
        })
        gap = detector.goal_gap(project, _goal(target="nan"))
        assert gap.target_value == 1.0
        assert gap.variance == pytest.approx(-0.5)

    def test_non_finite_current_reads_state(self, healthy_state):
        assert extract_current_value(healthy_state, _goal(current=float("nan"))) == 0.6


class TestSystemGaps:
    def test_healthy_state_has_none(self, detector, healthy_state):
        assert detector.system_gaps("p1", healthy_state) == []

    def test_troubled_state(self, detector, troubled_state):
        gaps = detector.system_gaps("p1", troubled_state)
        by_type = {g.type: g for g in gaps}
        assert list(by_type) == [GapType.TIMELINE, GapType.RESOURCE, GapType.QUALITY]
        assert all(g.tags == [SYSTEM_GAP_TAG] for g in gaps)

        timeline = by_type[GapType.TIMELINE]
        assert timeline.severity == SeverityLevel.HIGH
        assert timeline.description == "Project is delayed by 10 days"
        assert timeline.estimated_impact.type == ImpactType.TIMELINE
        assert timeline.estimated_impact.timeframe == Timeframe.SHORT_TERM

        resource = by_type[GapType.RESOURCE]
        assert resource.severity == SeverityLevel.CRITICAL
        assert resource.description == "Resources are over-utilized at 97.0%"
        assert resource.estimated_impact.level == ImpactLevel.SEVERE
        assert resource.estimated_impact.timeframe == Timeframe.IMMEDIATE

        quality = by_type[GapType.QUALITY]
        assert quality.severity == SeverityLevel.CRITICAL
        assert quality.category == GapCategory.TECHNICAL
        assert quality.target_value == 0.02

    def test_short_delay_is_medium(self, detector):
        state = ProjectState(
            project_id="p1", timeline={"delays": 3}, quality=QualityState(defect_rate=0.0)
        )
        gaps = detector.system_gaps("p1", state)
        assert len(gaps) == 1
        assert gaps[0].severity == SeverityLevel.MEDIUM
        assert gaps[0].estimated_impact.level == ImpactLevel.MEDIUM

    def test_high_utilization(self, detector):
        state = ProjectState(
            project_id="p1", resources={"utilization": 0.92}, quality={"defect_rate": 0.0}
        )
        gaps = detector.system_gaps("p1", state)
        assert [g.severity for g in gaps] == [SeverityLevel.HIGH]


class TestDetect:
    def test_goal_then_system_gaps(self, detector, sample_project):
        gaps = detector.detect(sample_project)
        assert len(gaps) == 4
        assert gaps[0].tags == [GOAL_GAP_TAG]
        assert all(g.project_id == sample_project.id for g in gaps)

    def test_no_goals(self, detector, sample_project, healthy_state):
        project = sample_project.model_copy(update={"goals": [], "state": healthy_state})
        assert detector.detect(project) == []
