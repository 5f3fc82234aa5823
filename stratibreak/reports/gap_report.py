"""Gap analysis report generator."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from stratibreak.models.results import GapAnalysisResult

TEMPLATE_DIR = Path(__file__).parent / "templates"


class GapReportGenerator:
    """Generates the per-category gap analysis report."""

    def __init__(self) -> None:
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, result: GapAnalysisResult, project_name: str | None = None) -> str:
        """Render the gap analysis report."""
        template = self.env.get_template("gap_report.txt")
        return template.render(
            result=result,
            project_name=project_name or result.project_id,
            summary=result.summary,
            buckets=[
                (gap_type, gaps, result.category_metrics[gap_type])
                for gap_type, gaps in result.identified_gaps.items()
            ],
        )
