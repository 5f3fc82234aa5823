"""Gap categorization: bucketing, per-category metrics and the cross-category summary.

Buckets always carry all ten GapType keys in declared order. Where a choice
between buckets ties, the earliest key in that order wins, so results are
reproducible for identical input.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from stratibreak.models.enums import GapType, RootCauseCategory, SeverityLevel, TrendDirection
from stratibreak.models.gap import Gap
from stratibreak.models.results import (
    AnalysisSummary,
    CategorizedGaps,
    GapAnalysisResult,
    GapCategoryMetrics,
    Recommendation,
)

DEFAULT_ROOT_CAUSE = RootCauseCategory.PROCESS


def empty_buckets() -> CategorizedGaps:
    return {gap_type: [] for gap_type in GapType}


def categorize(gaps: Iterable[Gap]) -> CategorizedGaps:
    """Place each gap in the bucket matching its type."""
    buckets = empty_buckets()
    for gap in gaps:
        buckets[gap.type].append(gap)
    return buckets


def flatten(categorized: CategorizedGaps) -> list[Gap]:
    return [gap for gap_type in GapType for gap in categorized.get(gap_type, [])]


def average_confidence(gaps: list[Gap]) -> float:
    """Mean confidence; unset confidence counts as 0 and an empty list yields 0."""
    if not gaps:
        return 0.0
    return sum(gap.confidence_or_default for gap in gaps) / len(gaps)


def count_by_severity(gaps: Iterable[Gap]) -> dict[str, int]:
    """Histogram keyed by severity value. Severities with no gaps are omitted."""
    counts: dict[str, int] = {}
    for gap in gaps:
        counts[gap.severity.value] = counts.get(gap.severity.value, 0) + 1
    return counts


def primary_root_cause(gaps: Iterable[Gap]) -> RootCauseCategory:
    counts = Counter(rc.category for gap in gaps for rc in gap.root_causes)
    if not counts:
        return DEFAULT_ROOT_CAUSE
    # Counter preserves first-seen order, and max keeps the first maximum
    return max(counts, key=counts.__getitem__)


def category_metrics(categorized: CategorizedGaps) -> dict[GapType, GapCategoryMetrics]:
    metrics: dict[GapType, GapCategoryMetrics] = {}
    for gap_type in GapType:
        bucket = categorized.get(gap_type, [])
        metrics[gap_type] = GapCategoryMetrics(
            total_count=len(bucket),
            by_severity=count_by_severity(bucket),
            average_confidence=average_confidence(bucket),
            primary_root_cause=primary_root_cause(bucket),
            trend=TrendDirection.STABLE,
        )
    return metrics


def _bucket_sizes(categorized: CategorizedGaps) -> list[tuple[GapType, int]]:
    return [(gap_type, len(categorized.get(gap_type, []))) for gap_type in GapType]


def most_affected_category(categorized: CategorizedGaps) -> GapType:
    best_type, best_count = GapType.RESOURCE, -1
    for gap_type, count in _bucket_sizes(categorized):
        if count > best_count:
            best_type, best_count = gap_type, count
    return best_type


def least_affected_category(categorized: CategorizedGaps) -> GapType:
    """Smallest bucket, empty buckets included."""
    best_type, best_count = GapType.RESOURCE, None
    for gap_type, count in _bucket_sizes(categorized):
        if best_count is None or count < best_count:
            best_type, best_count = gap_type, count
    return best_type


def summarize(categorized: CategorizedGaps) -> AnalysisSummary:
    all_gaps = flatten(categorized)
    return AnalysisSummary(
        total_gaps=len(all_gaps),
        critical_gaps=sum(1 for g in all_gaps if g.severity == SeverityLevel.CRITICAL),
        # only "high" counts here; critical gaps are reported separately
        high_priority_gaps=sum(1 for g in all_gaps if g.severity == SeverityLevel.HIGH),
        average_confidence=average_confidence(all_gaps),
        most_affected_category=most_affected_category(categorized),
        least_affected_category=least_affected_category(categorized),
    )


def map_result(
    project_id: str,
    categorized: CategorizedGaps,
    recommendations: list[Recommendation],
    overall_health_score: float,
    confidence: float,
    execution_time_ms: float = 0.0,
    analysis_timestamp: datetime | None = None,
) -> GapAnalysisResult:
    """Assemble a full analysis result, deriving metrics and summary from the buckets."""
    buckets = empty_buckets()
    for gap_type in GapType:
        buckets[gap_type] = list(categorized.get(gap_type, []))

    return GapAnalysisResult(
        project_id=project_id,
        analysis_timestamp=analysis_timestamp or datetime.now(),
        identified_gaps=buckets,
        category_metrics=category_metrics(buckets),
        summary=summarize(buckets),
        overall_health_score=overall_health_score,
        prioritized_recommendations=recommendations,
        execution_time_ms=execution_time_ms,
        confidence=confidence,
    )
