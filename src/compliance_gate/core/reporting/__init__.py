"""Compliance report rendering with Jinja2 templates.

Provides:
- ReportRenderer: Deterministic Markdown rendering of a ComplianceReport
- escape_table_cell: Markdown table-cell escaping
- export_html: HTML export from the Markdown report
"""

from .renderer import ReportRenderer, escape_table_cell
from .export import export_html

__all__ = ["ReportRenderer", "escape_table_cell", "export_html"]
