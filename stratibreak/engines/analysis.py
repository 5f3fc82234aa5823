"""Gap analysis pipeline: detect, score, categorize, summarize, recommend."""

import logging
import time
from datetime import datetime

from stratibreak.engines.categorization import average_confidence, categorize, map_result
from stratibreak.engines.detector import GOAL_GAP_TAG, GapDetector
from stratibreak.engines.recommendations import RecommendationEngine
from stratibreak.engines.severity import SeverityCalculator
from stratibreak.engines.severity_analysis import SeverityAnalyzer
from stratibreak.exceptions import AnalysisError
from stratibreak.models.enums import SeverityLevel
from stratibreak.models.gap import Gap
from stratibreak.models.project import Project
from stratibreak.models.results import GapAnalysisResult, SeverityAnalysis

logger = logging.getLogger(__name__)

HEALTH_PENALTIES: dict[SeverityLevel, float] = {
    SeverityLevel.CRITICAL: 15.0,
    SeverityLevel.HIGH: 8.0,
    SeverityLevel.MEDIUM: 4.0,
    SeverityLevel.LOW: 1.0,
}
UNKNOWN_CONFIDENCE_WEIGHT = 0.5
MAX_HEALTH = 100.0


def health_score(gaps: list[Gap]) -> float:
    """100 minus a severity penalty per gap, scaled by that gap's confidence.

    Gaps without a confidence count at half weight. Never below 0.
    """
    penalty = sum(
        HEALTH_PENALTIES[gap.severity]
        * (gap.confidence if gap.confidence is not None else UNKNOWN_CONFIDENCE_WEIGHT)
        for gap in gaps
    )
    return round(max(0.0, MAX_HEALTH - penalty), 1)


def result_confidence(gaps: list[Gap]) -> float:
    """Average gap confidence; an analysis that found nothing is fully confident."""
    if not gaps:
        return 1.0
    return average_confidence(gaps)


class GapAnalysisEngine:
    """Runs one project snapshot through the full analysis pipeline.

    The engine holds no per-analysis state, so a single instance can serve
    any number of projects.
    """

    def __init__(
        self,
        detector: GapDetector | None = None,
        calculator: SeverityCalculator | None = None,
        recommender: RecommendationEngine | None = None,
        severity_analyzer: SeverityAnalyzer | None = None,
    ):
        self.detector = detector or GapDetector()
        self.calculator = calculator or SeverityCalculator()
        self.recommender = recommender or RecommendationEngine()
        self.severity_analyzer = severity_analyzer or SeverityAnalyzer()

    def analyze(
        self,
        project: Project,
        historical: list[Gap] | None = None,
        benchmarks: list[Gap] | None = None,
    ) -> GapAnalysisResult:
        """Detect and score the gaps of a project and build the full result."""
        start = time.perf_counter()
        logger.info("Analyzing project %s (%d goals)", project.id, len(project.goals))

        detected = self.detector.detect(project)
        scored = [self.rescore(gap, historical, benchmarks) for gap in detected]
        return self._build(project.id, scored, start)

    def analyze_gaps(self, project_id: str, gaps: list[Gap]) -> GapAnalysisResult:
        """Build a result from gaps supplied by the caller, keeping their severities."""
        start = time.perf_counter()
        foreign = sorted({gap.project_id for gap in gaps if gap.project_id != project_id})
        if foreign:
            raise AnalysisError(
                project_id, f"gaps belong to other projects: {', '.join(foreign)}"
            )
        logger.info("Analyzing %d supplied gaps for project %s", len(gaps), project_id)
        return self._build(project_id, list(gaps), start)

    def rescore(
        self,
        gap: Gap,
        historical: list[Gap] | None = None,
        benchmarks: list[Gap] | None = None,
    ) -> Gap:
        """Return the gap with an ensemble severity. Threshold-based system gaps pass through."""
        if GOAL_GAP_TAG not in gap.tags:
            return gap
        severity = self.calculator.ensemble(gap, historical, benchmarks)
        if severity == gap.severity:
            return gap
        return gap.model_copy(update={"severity": severity})

    def severity_analysis(self, result: GapAnalysisResult) -> SeverityAnalysis:
        return self.severity_analyzer.analyze(
            result.project_id,
            result.all_gaps,
            result.confidence,
            analysis_timestamp=result.analysis_timestamp,
        )

    def _build(self, project_id: str, gaps: list[Gap], start: float) -> GapAnalysisResult:
        categorized = categorize(gaps)
        recommendations = self.recommender.generate(gaps)
        result = map_result(
            project_id,
            categorized,
            recommendations,
            overall_health_score=health_score(gaps),
            confidence=result_confidence(gaps),
            execution_time_ms=(time.perf_counter() - start) * 1000,
            analysis_timestamp=datetime.now(),
        )
        logger.info(
            "Project %s: %d gaps (%d critical), health %.1f in %.1f ms",
            project_id,
            result.summary.total_gaps,
            result.summary.critical_gaps,
            result.overall_health_score,
            result.execution_time_ms,
        )
        return result
