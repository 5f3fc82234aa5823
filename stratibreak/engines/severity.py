"""Severity scoring engine.

Scores a gap on a 0-1 scale with several independent methods and maps the
score onto a SeverityLevel. ``ensemble`` blends the methods into one vote.
"""

import logging

from stratibreak.models.enums import GapCategory, GapType, ImpactLevel, SeverityLevel, Timeframe
from stratibreak.models.gap import Gap

logger = logging.getLogger(__name__)

FACTOR_WEIGHTS = {
    "impact": 0.35,
    "urgency": 0.25,
    "complexity": 0.15,
    "resource_requirement": 0.15,
    "stakeholder_impact": 0.10,
}

TYPE_MULTIPLIERS: dict[GapType, float] = {
    GapType.RESOURCE: 0.9,
    GapType.PROCESS: 0.8,
    GapType.COMMUNICATION: 0.7,
    GapType.TECHNOLOGY: 0.8,
    GapType.CULTURE: 0.6,
    GapType.TIMELINE: 0.9,
    GapType.QUALITY: 0.8,
    GapType.BUDGET: 0.9,
    GapType.SKILL: 0.7,
    GapType.GOVERNANCE: 0.6,
}

CATEGORY_MULTIPLIERS: dict[GapCategory, float] = {
    GapCategory.OPERATIONAL: 0.9,
    GapCategory.STRATEGIC: 0.8,
    GapCategory.TACTICAL: 0.7,
    GapCategory.TECHNICAL: 0.8,
    GapCategory.ORGANIZATIONAL: 0.6,
}

TYPE_COMPLEXITY: dict[GapType, float] = {
    GapType.RESOURCE: 0.6,
    GapType.PROCESS: 0.8,
    GapType.COMMUNICATION: 0.7,
    GapType.TECHNOLOGY: 0.9,
    GapType.CULTURE: 1.0,
    GapType.TIMELINE: 0.5,
    GapType.QUALITY: 0.7,
    GapType.BUDGET: 0.4,
    GapType.SKILL: 0.8,
    GapType.GOVERNANCE: 0.9,
}

BASE_RESOURCE_REQUIREMENT: dict[GapType, float] = {
    GapType.RESOURCE: 0.9,
    GapType.PROCESS: 0.7,
    GapType.COMMUNICATION: 0.5,
    GapType.TECHNOLOGY: 0.8,
    GapType.CULTURE: 0.9,
    GapType.TIMELINE: 0.6,
    GapType.QUALITY: 0.7,
    GapType.BUDGET: 0.8,
    GapType.SKILL: 0.8,
    GapType.GOVERNANCE: 0.6,
}

IMPACT_LEVEL_SCORES: dict[ImpactLevel, float] = {
    ImpactLevel.SEVERE: 1.0,
    ImpactLevel.HIGH: 0.8,
    ImpactLevel.MEDIUM: 0.6,
    ImpactLevel.LOW: 0.4,
    ImpactLevel.NEGLIGIBLE: 0.2,
}

TIMEFRAME_SCORES: dict[str, float] = {
    Timeframe.IMMEDIATE: 1.0,
    Timeframe.SHORT_TERM: 0.8,
    Timeframe.MEDIUM_TERM: 0.6,
    Timeframe.LONG_TERM: 0.4,
}

# Fixed linear weights over the features built in _ml_features
ML_WEIGHTS = [0.2, 0.15, 0.1, 0.15, 0.2, 0.1, 0.05, 0.05]

UNKNOWN_SCORE = 0.5

ENSEMBLE_STANDARD_WEIGHT = 0.4
ENSEMBLE_RISK_WEIGHT = 0.3
ENSEMBLE_ML_WEIGHT = 0.2
ENSEMBLE_COMPARATIVE_WEIGHT = 0.1

_CALCULATION_ERRORS = (ArithmeticError, KeyError, TypeError, ValueError)


def score_to_severity(score: float) -> SeverityLevel:
    if score >= 0.8:
        return SeverityLevel.CRITICAL
    if score >= 0.6:
        return SeverityLevel.HIGH
    if score >= 0.4:
        return SeverityLevel.MEDIUM
    return SeverityLevel.LOW


def rank_to_severity(rank: float) -> SeverityLevel:
    """Map an averaged 1..4 rank back to a level."""
    if rank >= 3.5:
        return SeverityLevel.CRITICAL
    if rank >= 2.5:
        return SeverityLevel.HIGH
    if rank >= 1.5:
        return SeverityLevel.MEDIUM
    return SeverityLevel.LOW


class SeverityCalculator:
    """Scores gap severity with weighted, risk-based, feature-based and comparative methods."""

    # --- Public methods ---

    def weighted(self, gap: Gap) -> SeverityLevel:
        """Weighted factor score, scaled by type and category, then by confidence."""
        try:
            score = self.gap_score(gap)
            # Low-confidence gaps lose up to 20%
            adjusted = score * (0.8 + 0.2 * gap.confidence_or_default)
            severity = score_to_severity(adjusted)
        except _CALCULATION_ERRORS:
            logger.exception("Severity calculation failed for gap %r", gap.title)
            return SeverityLevel.MEDIUM

        logger.debug(
            "Weighted severity for gap %r: %s (score %.3f)", gap.title, severity, adjusted
        )
        return severity

    def risk_based(self, gap: Gap) -> SeverityLevel:
        try:
            score = (
                self._escalation_probability(gap) * 0.4
                + self._impact_magnitude(gap) * 0.4
                + self._time_sensitivity(gap) * 0.2
            )
        except _CALCULATION_ERRORS:
            logger.exception("Risk-based severity failed for gap %r", gap.title)
            return SeverityLevel.MEDIUM
        return score_to_severity(score)

    def ml_inspired(self, gap: Gap, historical: list[Gap] | None = None) -> SeverityLevel:
        """Linear model over gap features.

        ``historical`` is accepted for interface parity with ``ensemble``; the
        weights are fixed, so scoring is deterministic.
        """
        try:
            features = self._ml_features(gap)
            raw = sum(f * w for f, w in zip(features, ML_WEIGHTS))
            score = min(1.0, max(0.0, raw / 2))
        except _CALCULATION_ERRORS:
            logger.exception("Feature-based severity failed for gap %r", gap.title)
            return self.weighted(gap)
        return score_to_severity(score)

    def comparative(self, gap: Gap, benchmarks: list[Gap]) -> SeverityLevel:
        """Rank the gap's score against benchmark gaps by percentile."""
        if not benchmarks:
            return self.weighted(gap)
        try:
            value = self.gap_score(gap)
            scores = [self.gap_score(b) for b in benchmarks]
        except _CALCULATION_ERRORS:
            logger.exception("Comparative severity failed for gap %r", gap.title)
            return SeverityLevel.MEDIUM

        percentile = sum(1 for s in scores if s <= value) / len(scores)
        if percentile >= 0.9:
            return SeverityLevel.CRITICAL
        if percentile >= 0.7:
            return SeverityLevel.HIGH
        if percentile >= 0.4:
            return SeverityLevel.MEDIUM
        return SeverityLevel.LOW

    def ensemble(
        self,
        gap: Gap,
        historical: list[Gap] | None = None,
        benchmarks: list[Gap] | None = None,
    ) -> SeverityLevel:
        """Weighted vote of all methods on the 1..4 rank scale.

        Without history the feature-based weight moves to the risk-based vote;
        without benchmarks the comparative weight moves to the weighted vote.
        """
        standard_weight = ENSEMBLE_STANDARD_WEIGHT
        risk_weight = ENSEMBLE_RISK_WEIGHT
        votes: list[tuple[SeverityLevel, float]] = []

        if historical:
            votes.append((self.ml_inspired(gap, historical), ENSEMBLE_ML_WEIGHT))
        else:
            risk_weight += ENSEMBLE_ML_WEIGHT
        if benchmarks:
            votes.append((self.comparative(gap, benchmarks), ENSEMBLE_COMPARATIVE_WEIGHT))
        else:
            standard_weight += ENSEMBLE_COMPARATIVE_WEIGHT

        votes.insert(0, (self.risk_based(gap), risk_weight))
        votes.insert(0, (self.weighted(gap), standard_weight))

        total_weight = sum(weight for _, weight in votes)
        rank = sum(severity.rank * weight for severity, weight in votes) / total_weight
        return rank_to_severity(rank)

    def gap_score(self, gap: Gap) -> float:
        """Weighted factor score before the confidence adjustment, capped at 1."""
        base = (
            self._impact_score(gap) * FACTOR_WEIGHTS["impact"]
            + self._urgency(gap) * FACTOR_WEIGHTS["urgency"]
            + self._complexity(gap) * FACTOR_WEIGHTS["complexity"]
            + self._resource_requirement(gap) * FACTOR_WEIGHTS["resource_requirement"]
            + self._stakeholder_impact(gap) * FACTOR_WEIGHTS["stakeholder_impact"]
        )
        type_multiplier = TYPE_MULTIPLIERS.get(gap.type, UNKNOWN_SCORE)
        category_multiplier = CATEGORY_MULTIPLIERS.get(gap.resolved_category, UNKNOWN_SCORE)
        return min(1.0, base * type_multiplier * category_multiplier)

    # --- Factors ---

    @staticmethod
    def _impact_score(gap: Gap) -> float:
        if gap.estimated_impact is None:
            return UNKNOWN_SCORE
        return IMPACT_LEVEL_SCORES.get(gap.estimated_impact.level, UNKNOWN_SCORE)

    @staticmethod
    def _timeframe(gap: Gap) -> str | None:
        return gap.estimated_impact.timeframe if gap.estimated_impact else None

    @staticmethod
    def _stakeholder_count(gap: Gap) -> int:
        if gap.estimated_impact is None:
            return 0
        return len(gap.estimated_impact.affected_stakeholders)

    def _urgency(self, gap: Gap) -> float:
        variance_urgency = min(1.0, abs(gap.variance) * 2)
        timeframe_urgency = TIMEFRAME_SCORES.get(self._timeframe(gap), UNKNOWN_SCORE)
        return (variance_urgency + timeframe_urgency) / 2

    @staticmethod
    def _complexity(gap: Gap) -> float:
        root_cause_complexity = min(1.0, len(gap.root_causes) / 5)
        area_complexity = min(1.0, len(gap.affected_areas) / 3)
        type_complexity = TYPE_COMPLEXITY.get(gap.type, UNKNOWN_SCORE)
        return (root_cause_complexity + area_complexity + type_complexity) / 3

    @staticmethod
    def _resource_requirement(gap: Gap) -> float:
        base = BASE_RESOURCE_REQUIREMENT.get(gap.type, UNKNOWN_SCORE)
        return min(1.0, base * (1 + len(gap.root_causes) * 0.1))

    def _stakeholder_impact(self, gap: Gap) -> float:
        return min(1.0, self._stakeholder_count(gap) / 10)

    # --- Risk-based ---

    def _escalation_probability(self, gap: Gap) -> float:
        variance_factor = min(1.0, abs(gap.variance) * 1.5)
        complexity_factor = min(1.0, len(gap.root_causes) / 3)
        urgency_factor = 1.0 if self._timeframe(gap) == Timeframe.IMMEDIATE else 0.5
        return (variance_factor + complexity_factor + urgency_factor) / 3

    def _impact_magnitude(self, gap: Gap) -> float:
        stakeholder_factor = min(1.0, self._stakeholder_count(gap) / 5)
        area_factor = min(1.0, len(gap.affected_areas) / 3)
        return (self._impact_score(gap) + stakeholder_factor + area_factor) / 3

    def _time_sensitivity(self, gap: Gap) -> float:
        return TIMEFRAME_SCORES.get(self._timeframe(gap), UNKNOWN_SCORE)

    # --- Feature-based ---

    def _ml_features(self, gap: Gap) -> list[float]:
        return [
            abs(gap.variance),
            len(gap.root_causes),
            len(gap.affected_areas),
            gap.confidence_or_default,
            self._impact_score(gap),
            self._stakeholder_count(gap),
            TYPE_COMPLEXITY.get(gap.type, UNKNOWN_SCORE),
            CATEGORY_MULTIPLIERS.get(gap.resolved_category, UNKNOWN_SCORE),
        ]
