"""Run orchestration for one compliance evaluation.

Sequences reading, summarizing, evaluation, rendering and persistence, and
decides the process exit status.

The report records its own persistence (SEC-06), so the document is first
rendered assuming the write succeeds, then re-rendered from the actual
write outcome. Rendering is deterministic, so on success both renders are
identical and the file on disk matches what is emitted; on failure the
corrected document can only be emitted.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog

from compliance_gate.core.artifacts import ArtifactFile, ArtifactStore, ensure_directory
from compliance_gate.core.config import Config
from compliance_gate.core.controls import collect_evidence, evaluate_controls, evaluate_sec06
from compliance_gate.core.models import ComplianceReport, ControlStatus
from compliance_gate.core.reporting import ReportRenderer

logger = structlog.get_logger()

CONSOLE_HEADER = "\n=== Compliance Report ===\n"
CONSOLE_FOOTER = "\n=== End of Compliance Report ===\n"


@dataclass(frozen=True)
class RunOutcome:
    """Final state of one evaluation run."""

    report: ComplianceReport
    document: str
    report_path: Path
    written: bool

    @property
    def exit_code(self) -> int:
        """0 only if the report was written and every control passed."""
        if self.written and self.report.overall_status == ControlStatus.PASS:
            return 0
        return 1


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def write_document(path: Path, document: str) -> bool:
    """Write the report document, overwriting any previous run.

    Returns:
        True if the write succeeded; failures are logged, not raised
    """
    try:
        await asyncio.to_thread(path.write_text, document, encoding="utf-8")
    except (OSError, ValueError) as e:
        logger.error("report_write_failed", path=str(path), error=str(e))
        return False

    logger.info("report_written", path=str(path), size=len(document))
    return True


def append_step_summary(path: Path, document: str) -> None:
    """Append the document to the CI step summary file (best effort)."""
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(document + "\n")
    except (OSError, ValueError) as e:
        logger.warning("step_summary_write_failed", path=str(path), error=str(e))


async def run_evaluation(
    config: Config,
    emit: Callable[[str], None] = print,
    renderer: ReportRenderer | None = None,
    timestamp: str | None = None,
) -> RunOutcome:
    """Evaluate all controls and persist the compliance report.

    Args:
        config: Artifact directory, report name and pipeline metadata
        emit: Secondary output channel for the final document
        renderer: Report renderer (defaults to the packaged template)
        timestamp: Generation timestamp (defaults to now, UTC)

    Returns:
        RunOutcome with the final report, document and exit code
    """
    renderer = renderer or ReportRenderer()
    timestamp = timestamp or utc_timestamp()
    report_path = config.report_path
    log = logger.bind(artifact_dir=str(config.artifact_dir))

    ensure_directory(config.artifact_dir)

    store = ArtifactStore(config.artifact_dir)
    results = await store.read_all([artifact.value for artifact in ArtifactFile])
    log.info(
        "artifacts_loaded",
        found=sum(r.found for r in results.values()),
        parsed=sum(r.parsed for r in results.values()),
    )

    evidence = collect_evidence(results)
    verdicts = evaluate_controls(evidence)
    context = config.pipeline_context()

    def build(written: bool) -> ComplianceReport:
        return ComplianceReport(
            timestamp=timestamp,
            context=context,
            verdicts=(*verdicts, evaluate_sec06(report_path, written)),
        )

    tentative = renderer.render(build(written=True))
    written = await write_document(report_path, tentative)

    report = build(written)
    document = renderer.render(report)
    if written and document != tentative:
        written = await write_document(report_path, document)
        if not written:
            report = build(written=False)
            document = renderer.render(report)

    emit(CONSOLE_HEADER)
    emit(document)
    emit(CONSOLE_FOOTER)

    if config.step_summary_path is not None:
        append_step_summary(config.step_summary_path, document)

    outcome = RunOutcome(report=report, document=document, report_path=report_path, written=written)
    log.info(
        "evaluation_complete",
        overall_status=report.overall_status.value,
        failing=[verdict.id for verdict in report.failing],
        exit_code=outcome.exit_code,
    )
    return outcome
