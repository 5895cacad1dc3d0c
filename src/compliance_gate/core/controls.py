"""Compliance control evaluation.

Each control is an independent pure function over a shared Evidence
record. Rules never raise, and any evidence that is missing, malformed, or
ambiguous yields FAIL.

Provides:
- Evidence: Read results plus derived summaries for one run
- collect_evidence: Build Evidence from artifact read results
- evaluate_sec01 .. evaluate_sec06: The six control rules
- CONTROL_CATALOG: Control ids with their titles, in report order
- evaluate_controls: Run the artifact-based controls (SEC-01..SEC-05)
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from compliance_gate.core.artifacts import ArtifactFile, ArtifactReadResult
from compliance_gate.core.models import (
    ArtifactErrorKind,
    ControlStatus,
    ControlVerdict,
    HardeningSummary,
    SecretCount,
    Severity,
    VulnerabilitySummary,
)
from compliance_gate.summarizers import (
    BLOCKING_LEVELS,
    count_secret_findings,
    summarize_hardening,
    summarize_vulnerabilities,
)

SEC01 = "SEC-01"
SEC02 = "SEC-02"
SEC03 = "SEC-03"
SEC04 = "SEC-04"
SEC05 = "SEC-05"
SEC06 = "SEC-06"

CONTROL_CATALOG: tuple[tuple[str, str], ...] = (
    (SEC01, "No secrets committed (Gitleaks)"),
    (SEC02, "Filesystem and image vulnerability scans present (Trivy)"),
    (SEC03, "Container image hardening (Dockle)"),
    (SEC04, "No CRITICAL vulnerabilities (Trivy)"),
    (SEC05, "Software bill of materials present"),
    (SEC06, "Compliance report persisted"),
)


@dataclass(frozen=True)
class Evidence:
    """Everything the controls may inspect for one run."""

    gitleaks: ArtifactReadResult
    trivy_fs: ArtifactReadResult
    trivy_image: ArtifactReadResult
    dockle: ArtifactReadResult
    sbom: ArtifactReadResult
    secret_count: SecretCount | None = None
    trivy_fs_summary: VulnerabilitySummary | None = None
    trivy_image_summary: VulnerabilitySummary | None = None
    dockle_summary: HardeningSummary | None = None


def _missing(name: str) -> ArtifactReadResult:
    return ArtifactReadResult(
        name=name, path=Path(name), error="File not found", error_kind=ArtifactErrorKind.NOT_FOUND
    )


def collect_evidence(results: Mapping[str, ArtifactReadResult]) -> Evidence:
    """Derive summaries from read results.

    Summaries are only computed for parsed artifacts; an artifact absent
    from ``results`` is treated as not found.

    Args:
        results: Read results keyed by artifact file name

    Returns:
        Evidence for the control rules
    """

    def result(artifact: ArtifactFile) -> ArtifactReadResult:
        return results.get(artifact.value) or _missing(artifact.value)

    gitleaks = result(ArtifactFile.GITLEAKS)
    trivy_fs = result(ArtifactFile.TRIVY_FS)
    trivy_image = result(ArtifactFile.TRIVY_IMAGE)
    dockle = result(ArtifactFile.DOCKLE)

    return Evidence(
        gitleaks=gitleaks,
        trivy_fs=trivy_fs,
        trivy_image=trivy_image,
        dockle=dockle,
        sbom=result(ArtifactFile.SBOM),
        secret_count=count_secret_findings(gitleaks.data) if gitleaks.usable else None,
        trivy_fs_summary=summarize_vulnerabilities(trivy_fs.data) if trivy_fs.usable else None,
        trivy_image_summary=(
            summarize_vulnerabilities(trivy_image.data) if trivy_image.usable else None
        ),
        dockle_summary=summarize_hardening(dockle.data) if dockle.usable else None,
    )


def _fail(control_id: str, details: str) -> ControlVerdict:
    return ControlVerdict(id=control_id, status=ControlStatus.FAIL, details=details)


def _pass(control_id: str, details: str) -> ControlVerdict:
    return ControlVerdict(id=control_id, status=ControlStatus.PASS, details=details)


def _artifact_problem(artifact: ArtifactReadResult) -> str | None:
    """Describe why an artifact is unusable, or None if it parsed."""
    if not artifact.found:
        return f"{artifact.name} not found"
    if not artifact.parsed:
        return f"{artifact.name} is not valid JSON ({artifact.error})"
    return None


def _format_count(count: int | float) -> str:
    if isinstance(count, float) and count.is_integer():
        return str(int(count))
    return str(count)


def evaluate_sec01(evidence: Evidence) -> ControlVerdict:
    """SEC-01: Gitleaks ran and reported zero findings."""
    problem = _artifact_problem(evidence.gitleaks)
    if problem:
        return _fail(SEC01, problem)

    secrets = evidence.secret_count
    if secrets is None or not secrets.determined:
        error = secrets.error if secrets else "no finding count derived"
        return _fail(SEC01, f"Unable to determine findings in {evidence.gitleaks.name}: {error}")

    if secrets.count > 0:
        return _fail(SEC01, f"Gitleaks detected {_format_count(secrets.count)} potential secret(s)")

    return _pass(SEC01, "No secrets detected by Gitleaks (0 findings)")


def evaluate_sec02(evidence: Evidence) -> ControlVerdict:
    """SEC-02: Both Trivy reports exist and are valid JSON.

    Content is not inspected here; the summaries only enrich the details.
    """
    issues = [
        problem
        for problem in (
            _artifact_problem(evidence.trivy_fs),
            _artifact_problem(evidence.trivy_image),
        )
        if problem
    ]
    if issues:
        return _fail(SEC02, "; ".join(issues))

    fs_text = (
        evidence.trivy_fs_summary.format("FS")
        if evidence.trivy_fs_summary is not None
        else "Trivy FS: summary unavailable (unexpected JSON structure)"
    )
    image_text = (
        evidence.trivy_image_summary.format("Image")
        if evidence.trivy_image_summary is not None
        else "Trivy image: summary unavailable (unexpected JSON structure)"
    )
    return _pass(
        SEC02,
        f"{evidence.trivy_fs.name} and {evidence.trivy_image.name} present and valid. "
        f"{fs_text}; {image_text}",
    )


def evaluate_sec03(evidence: Evidence) -> ControlVerdict:
    """SEC-03: Dockle reported nothing at FATAL, ERROR, or WARN level.

    A valid Dockle report whose structure cannot be interpreted passes as
    informational.
    """
    problem = _artifact_problem(evidence.dockle)
    if problem:
        return _fail(SEC03, problem)

    summary = evidence.dockle_summary
    if summary is None:
        return _pass(
            SEC03,
            f"{evidence.dockle.name} present and valid "
            "(unable to infer finding levels; treating as informational)",
        )

    if summary.count(*BLOCKING_LEVELS) > 0:
        return _fail(SEC03, f"Dockle reported hardening issues ({summary.format()})")

    return _pass(SEC03, f"Dockle scan clean ({summary.format()})")


def evaluate_sec04(evidence: Evidence) -> ControlVerdict:
    """SEC-04: Neither Trivy report contains a CRITICAL vulnerability."""
    problems = []
    if not evidence.trivy_fs.usable:
        problems.append("Trivy FS scan missing or invalid")
    if not evidence.trivy_image.usable:
        problems.append("Trivy image scan missing or invalid")
    if problems:
        return _fail(SEC04, "; ".join(problems))

    fs_summary = evidence.trivy_fs_summary
    image_summary = evidence.trivy_image_summary
    if fs_summary is None or image_summary is None:
        return _fail(SEC04, "Unable to interpret Trivy JSON structure to count vulnerabilities")

    critical = fs_summary.count(Severity.CRITICAL) + image_summary.count(Severity.CRITICAL)
    summaries = f"{fs_summary.format('FS')}; {image_summary.format('Image')}"

    if critical > 0:
        return _fail(SEC04, f"CRITICAL vulnerabilities detected. {summaries}")

    return _pass(SEC04, f"No CRITICAL vulnerabilities in Trivy scans. {summaries}")


def evaluate_sec05(evidence: Evidence) -> ControlVerdict:
    """SEC-05: The SBOM exists and is valid JSON (content not inspected)."""
    problem = _artifact_problem(evidence.sbom)
    if problem:
        return _fail(SEC05, problem)
    return _pass(SEC05, f"{evidence.sbom.name} present and valid (SBOM generated)")


def evaluate_sec06(report_path: Path, written: bool) -> ControlVerdict:
    """SEC-06: The compliance report was durably written."""
    if written:
        return _pass(SEC06, f"Report generated at {report_path}")
    return _fail(SEC06, f"Failed to generate report at {report_path}")


ARTIFACT_CONTROLS: tuple[Callable[[Evidence], ControlVerdict], ...] = (
    evaluate_sec01,
    evaluate_sec02,
    evaluate_sec03,
    evaluate_sec04,
    evaluate_sec05,
)


def evaluate_controls(evidence: Evidence) -> list[ControlVerdict]:
    """Evaluate SEC-01..SEC-05 in report order.

    SEC-06 depends on the report write and is evaluated by the runner.
    """
    return [rule(evidence) for rule in ARTIFACT_CONTROLS]
