"""Severity distribution analysis over a project's gap set."""

import logging
import math
import time
from datetime import datetime

from stratibreak.engines.categorization import average_confidence
from stratibreak.models.enums import (
    GapType,
    OverallSeverity,
    Priority,
    SeverityLevel,
    TrendDirection,
)
from stratibreak.models.gap import Gap
from stratibreak.models.results import (
    SeverityAnalysis,
    SeverityDistribution,
    SeverityMetrics,
    SeverityRecommendation,
    SeverityTrend,
)

logger = logging.getLogger(__name__)

# Governance and unknown types weigh 0.5
TYPE_WEIGHTS: dict[GapType, float] = {
    GapType.RESOURCE: 0.9,
    GapType.PROCESS: 0.8,
    GapType.COMMUNICATION: 0.7,
    GapType.TECHNOLOGY: 0.8,
    GapType.CULTURE: 0.6,
    GapType.TIMELINE: 0.9,
    GapType.QUALITY: 0.8,
    GapType.BUDGET: 0.9,
    GapType.SKILL: 0.7,
}
DEFAULT_TYPE_WEIGHT = 0.5
MAX_RANK = 4


class SeverityAnalyzer:
    """Summarizes how a gap set is spread across severity levels."""

    def analyze(
        self,
        project_id: str,
        gaps: list[Gap],
        confidence: float,
        analysis_timestamp: datetime | None = None,
    ) -> SeverityAnalysis:
        start = time.perf_counter()
        distribution = self.distribution(gaps)

        analysis = SeverityAnalysis(
            project_id=project_id,
            analysis_timestamp=analysis_timestamp or datetime.now(),
            distribution=distribution,
            metrics=self.metrics(gaps),
            gaps_by_severity=self.group_by_severity(gaps),
            trends=self.trends(distribution),
            recommendations=self.recommendations(distribution),
            overall_assessment=self.overall_assessment(distribution),
            analysis_confidence=confidence,
            execution_time_ms=(time.perf_counter() - start) * 1000,
        )
        logger.debug(
            "Severity analysis for %s: %s (%d gaps)",
            project_id, analysis.overall_assessment, distribution.total,
        )
        return analysis

    @staticmethod
    def distribution(gaps: list[Gap]) -> SeverityDistribution:
        counts = {level: 0 for level in SeverityLevel}
        for gap in gaps:
            counts[gap.severity] += 1
        return SeverityDistribution(
            critical=counts[SeverityLevel.CRITICAL],
            high=counts[SeverityLevel.HIGH],
            medium=counts[SeverityLevel.MEDIUM],
            low=counts[SeverityLevel.LOW],
            total=len(gaps),
        )

    @staticmethod
    def metrics(gaps: list[Gap]) -> SeverityMetrics:
        if not gaps:
            return SeverityMetrics(
                average_severity_score=0.0,
                weighted_severity_score=0.0,
                severity_volatility=0.0,
                escalation_probability=0.0,
                dominant_severity=SeverityLevel.LOW,
                calculation_confidence=1.0,
            )

        ranks = [gap.severity.rank for gap in gaps]
        mean = sum(ranks) / len(ranks)
        weighted = sum(
            rank * TYPE_WEIGHTS.get(gap.type, DEFAULT_TYPE_WEIGHT)
            for rank, gap in zip(ranks, gaps)
        ) / len(gaps)
        variance = sum((rank - mean) ** 2 for rank in ranks) / len(ranks)
        escalating = sum(
            1 for gap in gaps
            if gap.severity in (SeverityLevel.HIGH, SeverityLevel.CRITICAL)
        )

        counts: dict[SeverityLevel, int] = {}
        for gap in gaps:
            counts[gap.severity] = counts.get(gap.severity, 0) + 1
        dominant, top = SeverityLevel.LOW, 0
        for severity, count in counts.items():
            if count > top:
                dominant, top = severity, count

        return SeverityMetrics(
            average_severity_score=mean / MAX_RANK,
            weighted_severity_score=weighted / MAX_RANK,
            severity_volatility=math.sqrt(variance) / MAX_RANK,
            escalation_probability=escalating / len(gaps),
            dominant_severity=dominant,
            calculation_confidence=average_confidence(gaps),
        )

    @staticmethod
    def group_by_severity(gaps: list[Gap]) -> dict[SeverityLevel, list[Gap]]:
        groups: dict[SeverityLevel, list[Gap]] = {
            SeverityLevel.CRITICAL: [],
            SeverityLevel.HIGH: [],
            SeverityLevel.MEDIUM: [],
            SeverityLevel.LOW: [],
        }
        for gap in gaps:
            groups[gap.severity].append(gap)
        return groups

    @staticmethod
    def trends(distribution: SeverityDistribution) -> list[SeverityTrend]:
        """Single-snapshot trend estimate.

        No history is stored, so the previous count is assumed: one fewer for
        critical and high, one more for medium, unchanged for low.
        """
        def trend(severity: SeverityLevel, current: int, previous: int) -> SeverityTrend:
            if current > previous:
                direction = TrendDirection.INCREASING
            elif current < previous:
                direction = TrendDirection.DECREASING
            else:
                direction = TrendDirection.STABLE
            change = ((current - previous) / max(1, previous)) * 100 if current > 0 else 0.0
            return SeverityTrend(
                severity=severity,
                current_count=current,
                previous_count=previous,
                change_percentage=change,
                trend=direction,
            )

        d = distribution
        return [
            trend(SeverityLevel.CRITICAL, d.critical, max(0, d.critical - 1)),
            trend(SeverityLevel.HIGH, d.high, max(0, d.high - 1)),
            trend(SeverityLevel.MEDIUM, d.medium, d.medium + 1),
            trend(SeverityLevel.LOW, d.low, d.low),
        ]

    @staticmethod
    def recommendations(distribution: SeverityDistribution) -> list[SeverityRecommendation]:
        d = distribution
        recs: list[SeverityRecommendation] = []
        if d.critical > 0:
            plural = "s" if d.critical > 1 else ""
            recs.append(SeverityRecommendation(
                id="sev_rec_critical",
                target_severity=SeverityLevel.CRITICAL,
                action=f"Immediately address {d.critical} critical gap{plural}",
                priority=Priority.URGENT,
                expected_impact="Reduce critical gaps by 80%",
                estimated_effort="high",
                timeline="1-2 weeks",
            ))
        if d.high > 2:
            recs.append(SeverityRecommendation(
                id="sev_rec_high",
                target_severity=SeverityLevel.HIGH,
                action=f"Prioritize {d.high} high-severity gaps",
                priority=Priority.HIGH,
                expected_impact="Prevent escalation",
                estimated_effort="medium",
                timeline="2-4 weeks",
            ))
        if d.medium > 5:
            recs.append(SeverityRecommendation(
                id="sev_rec_medium",
                target_severity=SeverityLevel.MEDIUM,
                action=f"Address {d.medium} medium-severity gaps",
                priority=Priority.MEDIUM,
                expected_impact="Prevent accumulation",
                estimated_effort="medium",
                timeline="4-8 weeks",
            ))
        return recs

    @staticmethod
    def overall_assessment(distribution: SeverityDistribution) -> OverallSeverity:
        d = distribution
        if d.critical > 0:
            return OverallSeverity.CRITICAL
        if d.high > 2:
            return OverallSeverity.HIGH
        if d.medium > 3 or d.high > 0:
            return OverallSeverity.MODERATE
        return OverallSeverity.LOW
