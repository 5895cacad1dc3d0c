"""HTML export of compliance reports.

Converts the Markdown report into a standalone, styled HTML page for
pipelines that publish the report as a browsable artifact.
"""

import re
from pathlib import Path

import markdown

_STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
            line-height: 1.5;
            max-width: 1000px;
            margin: 0 auto;
            padding: 20px;
            color: #333;
        }

        h1 {
            border-bottom: 3px solid #3498db;
            padding-bottom: 10px;
        }

        table {
            border-collapse: collapse;
            width: 100%;
            margin: 20px 0;
        }

        th, td {
            border: 1px solid #ddd;
            padding: 8px 12px;
            text-align: left;
            vertical-align: top;
        }

        th {
            background-color: #3498db;
            color: white;
        }

        code {
            background-color: #f4f4f4;
            border-radius: 3px;
            padding: 2px 6px;
            font-family: "Courier New", monospace;
        }

        .status-pass {
            color: #27ae60;
            font-weight: bold;
        }

        .status-fail {
            color: #c0392b;
            font-weight: bold;
        }
"""

# Status cells and the bold overall status line
_STATUS_CELL = re.compile(r"<(td|strong)>(PASS|FAIL)</\1>")


def _mark_statuses(html_body: str) -> str:
    return _STATUS_CELL.sub(
        lambda m: f'<{m[1]} class="status-{m[2].lower()}">{m[2]}</{m[1]}>',
        html_body,
    )


def export_html(markdown_content: str, output_path: str | Path) -> Path:
    """Export a Markdown compliance report to a styled HTML document.

    Args:
        markdown_content: Markdown report string
        output_path: Path to write HTML file

    Returns:
        Path to written HTML file

    Example:
        >>> html_path = export_html(document, "artifacts/compliance-report.html")
    """
    html_body = markdown.markdown(markdown_content, extensions=["tables"])

    html_document = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Compliance Report</title>
    <style>{_STYLE}    </style>
</head>
<body>
{_mark_statuses(html_body)}
</body>
</html>
"""

    output_path = Path(output_path)
    output_path.write_text(html_document, encoding="utf-8")
    return output_path
