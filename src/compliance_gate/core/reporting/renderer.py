"""Compliance report renderer with Jinja2 templates.

Renders a ComplianceReport to Markdown. Rendering is pure: the same report
always produces byte-identical output, so a document rendered before the
report is written can be compared with one rendered afterwards.
"""

import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from compliance_gate.core.models import ComplianceReport

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def escape_table_cell(text: str) -> str:
    """Make text safe inside a Markdown table cell.

    Pipes are escaped and line breaks folded to spaces so a cell can never
    split a row.

    Args:
        text: Raw cell text

    Returns:
        Escaped single-line text
    """
    return _LINE_BREAK.sub(" ", str(text)).replace("|", "\\|")


class ReportRenderer:
    """Render compliance reports to Markdown.

    The document contains the title, generation timestamp, pipeline context,
    a control summary table, the overall status, and, when any control
    failed, a list of the failing controls.
    """

    template_name = "compliance_report.md.j2"

    def __init__(self, template_dir: str | None = None):
        """Initialize renderer with Jinja2 templates.

        Args:
            template_dir: Path to template directory (defaults to ./templates/)
        """
        if template_dir is None:
            template_dir = str(Path(__file__).parent / "templates")
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["table_cell"] = escape_table_cell

    def render(self, report: ComplianceReport) -> str:
        """Render a report to Markdown.

        Args:
            report: Verdicts, timestamp and pipeline context to render

        Returns:
            Markdown document

        Example:
            >>> renderer = ReportRenderer()
            >>> markdown = renderer.render(report)
            >>> markdown.startswith("# Compliance Report")
            True
        """
        template = self.env.get_template(self.template_name)
        return template.render(
            timestamp=report.timestamp,
            context=report.context,
            verdicts=report.verdicts,
            overall_status=report.overall_status,
            failing=report.failing,
        )
