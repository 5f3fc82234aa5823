"""Severity analysis report generator."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from stratibreak.models.results import SeverityAnalysis

TEMPLATE_DIR = Path(__file__).parent / "templates"


class SeverityReportGenerator:
    """Generates the severity distribution report."""

    def __init__(self) -> None:
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, analysis: SeverityAnalysis) -> str:
        """Render the severity report."""
        template = self.env.get_template("severity_report.txt")
        return template.render(analysis=analysis, metrics=analysis.metrics)
