"""AsyncClick CLI for the compliance gate.

Provides user-facing commands:
- evaluate: Evaluate scanner artifacts, write the report, exit non-zero on failure
- controls: List the compliance controls
"""

import sys

import asyncclick as click
import structlog

from compliance_gate.core.config import load_config
from compliance_gate.core.controls import CONTROL_CATALOG

logger = structlog.get_logger()


def configure_logging() -> None:
    """Send structured logs to stderr so stdout carries only the report."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))


@click.group()
@click.pass_context
async def cli(ctx):
    """Compliance gate - evaluate security scanner artifacts against policy controls"""
    ctx.ensure_object(dict)


@cli.command()
@click.option(
    "--artifact-dir",
    "-d",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory with scanner outputs (default: $ARTIFACT_DIR or ./artifacts)",
)
@click.option("--html", is_flag=True, help="Also write an HTML copy of the report")
async def evaluate(artifact_dir: str | None, html: bool):
    """Evaluate all controls and write the compliance report.

    Exits 0 only if the report was written and every control passed.

    Examples:
        compliance-gate evaluate
        compliance-gate evaluate -d build/artifacts --html
    """
    from compliance_gate.core.runner import run_evaluation

    try:
        config = load_config(artifact_dir)
        outcome = await run_evaluation(config, emit=click.echo)
    except Exception as e:
        # Any defect in the run itself must still fail the pipeline
        logger.exception("evaluation_crashed", error=str(e))
        click.echo(f"[-] Compliance evaluation failed unexpectedly: {e}", err=True)
        outcome = None

    if outcome is None:
        raise click.exceptions.Exit(1)

    if html and outcome.written:
        from compliance_gate.core.reporting import export_html

        html_path = outcome.report_path.with_suffix(".html")
        try:
            export_html(outcome.document, html_path)
            click.echo(f"[+] HTML report generated: {html_path}", err=True)
        except OSError as e:
            logger.warning("html_export_failed", path=str(html_path), error=str(e))

    raise click.exceptions.Exit(outcome.exit_code)


@cli.command()
async def controls():
    """List the compliance controls in report order."""
    for control_id, title in CONTROL_CATALOG:
        click.echo(f"{control_id}  {title}")


def main() -> None:
    """Console entry point."""
    configure_logging()
    cli()


if __name__ == "__main__":
    main()
