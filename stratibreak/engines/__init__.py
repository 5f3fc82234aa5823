"""Gap analysis engines."""

from stratibreak.engines.analysis import GapAnalysisEngine
from stratibreak.engines.categorization import categorize, summarize
from stratibreak.engines.detector import GapDetector
from stratibreak.engines.recommendations import RecommendationEngine
from stratibreak.engines.severity import SeverityCalculator
from stratibreak.engines.severity_analysis import SeverityAnalyzer

__all__ = [
    "GapAnalysisEngine",
    "GapDetector",
    "RecommendationEngine",
    "SeverityAnalyzer",
    "SeverityCalculator",
    "categorize",
    "summarize",
]
