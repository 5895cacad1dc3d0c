"""Tests for the compliance control rules.

Each rule is exercised against present/valid, missing, invalid and
ambiguous evidence; every indeterminate state must FAIL.
"""

from pathlib import Path

import pytest

from compliance_gate.core.artifacts import ArtifactFile, ArtifactReadResult
from compliance_gate.core.controls import (
    CONTROL_CATALOG,
    collect_evidence,
    evaluate_controls,
    evaluate_sec01,
    evaluate_sec02,
    evaluate_sec03,
    evaluate_sec04,
    evaluate_sec05,
    evaluate_sec06,
)
from compliance_gate.core.models import ControlStatus

CLEAN_TRIVY = {"SchemaVersion": 2, "Results": [{"Target": "app", "Vulnerabilities": []}]}


# Helpers


def parsed(name: str, data) -> ArtifactReadResult:
    return ArtifactReadResult(name=name, path=Path(name), found=True, parsed=True, data=data)


def missing(name: str) -> ArtifactReadResult:
    return ArtifactReadResult(name=name, path=Path(name), error="File not found")


def invalid(name: str) -> ArtifactReadResult:
    return ArtifactReadResult(
        name=name,
        path=Path(name),
        found=True,
        error="Invalid JSON: Expecting value: line 1 column 1 (char 0)",
    )


def evidence_with(**overrides):
    """Evidence where every artifact is clean unless overridden."""
    results = {
        ArtifactFile.GITLEAKS.value: parsed("gitleaks.json", []),
        ArtifactFile.TRIVY_FS.value: parsed("trivy-fs.json", CLEAN_TRIVY),
        ArtifactFile.TRIVY_IMAGE.value: parsed("trivy-image.json", CLEAN_TRIVY),
        ArtifactFile.DOCKLE.value: parsed("dockle.json", {"details": []}),
        ArtifactFile.SBOM.value: parsed("sbom.json", {}),
    }
    results.update(overrides)
    return collect_evidence(results)


def trivy(*severities):
    return {"Results": [{"Vulnerabilities": [{"Severity": s} for s in severities]}]}


# All clean


def test_clean_evidence_passes_every_control():
    """Test clean artifacts pass SEC-01 through SEC-05."""
    verdicts = evaluate_controls(evidence_with())

    assert [v.id for v in verdicts] == ["SEC-01", "SEC-02", "SEC-03", "SEC-04", "SEC-05"]
    assert all(v.status == ControlStatus.PASS for v in verdicts)


def test_missing_results_are_treated_as_not_found():
    """Test artifacts absent from the results mapping fail closed."""
    verdicts = evaluate_controls(collect_evidence({}))

    assert all(v.status == ControlStatus.FAIL for v in verdicts)
    assert verdicts[0].details == "gitleaks.json not found"


def test_catalog_lists_six_controls_in_order():
    """Test the control catalog is complete and ordered."""
    assert [control_id for control_id, _ in CONTROL_CATALOG] == [
        "SEC-01",
        "SEC-02",
        "SEC-03",
        "SEC-04",
        "SEC-05",
        "SEC-06",
    ]


# SEC-01


def test_sec01_pass_on_zero_findings():
    verdict = evaluate_sec01(evidence_with())

    assert verdict.status == ControlStatus.PASS
    assert verdict.details == "No secrets detected by Gitleaks (0 findings)"


def test_sec01_fail_on_findings():
    verdict = evaluate_sec01(evidence_with(**{"gitleaks.json": parsed("gitleaks.json", [{}, {}])}))

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details == "Gitleaks detected 2 potential secret(s)"


def test_sec01_fail_on_numeric_total():
    verdict = evaluate_sec01(evidence_with(**{"gitleaks.json": parsed("gitleaks.json", {"total": 3.0})}))

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details == "Gitleaks detected 3 potential secret(s)"


def test_sec01_fail_when_missing():
    verdict = evaluate_sec01(evidence_with(**{"gitleaks.json": missing("gitleaks.json")}))

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details == "gitleaks.json not found"


def test_sec01_fail_when_invalid():
    verdict = evaluate_sec01(evidence_with(**{"gitleaks.json": invalid("gitleaks.json")}))

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details.startswith("gitleaks.json is not valid JSON (Invalid JSON:")


def test_sec01_fail_on_indeterminate_structure():
    """Test an unrecognized object fails instead of counting zero."""
    verdict = evaluate_sec01(
        evidence_with(**{"gitleaks.json": parsed("gitleaks.json", {"version": "8.18.0"})})
    )

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details.startswith("Unable to determine findings in gitleaks.json:")
    assert "Unknown Gitleaks JSON structure" in verdict.details


# SEC-02


def test_sec02_pass_includes_summaries():
    verdict = evaluate_sec02(
        evidence_with(**{"trivy-fs.json": parsed("trivy-fs.json", trivy("HIGH"))})
    )

    assert verdict.status == ControlStatus.PASS
    assert verdict.details.startswith("trivy-fs.json and trivy-image.json present and valid. ")
    assert "Trivy FS: total 1, CRITICAL: 0, HIGH: 1" in verdict.details
    assert "Trivy Image: total 0" in verdict.details


def test_sec02_pass_when_content_unrecognized():
    """Test coverage only requires valid JSON; the summary is marked unavailable."""
    verdict = evaluate_sec02(
        evidence_with(**{"trivy-image.json": parsed("trivy-image.json", {"unexpected": True})})
    )

    assert verdict.status == ControlStatus.PASS
    assert "Trivy image: summary unavailable (unexpected JSON structure)" in verdict.details


def test_sec02_fail_lists_each_problem():
    verdict = evaluate_sec02(
        evidence_with(
            **{
                "trivy-fs.json": missing("trivy-fs.json"),
                "trivy-image.json": invalid("trivy-image.json"),
            }
        )
    )

    assert verdict.status == ControlStatus.FAIL
    problems = verdict.details.split("; ")
    assert problems[0] == "trivy-fs.json not found"
    assert problems[1].startswith("trivy-image.json is not valid JSON")


# SEC-03


def test_sec03_pass_on_empty_details_reports_no_findings():
    """Test a recognized but empty report passes with an explicit 'no findings'."""
    verdict = evaluate_sec03(evidence_with())

    assert verdict.status == ControlStatus.PASS
    assert verdict.details == "Dockle scan clean (no findings)"


def test_sec03_pass_on_unrecognized_structure_is_distinguishable():
    """Test an unrecognized report passes with a distinct caveat."""
    verdict = evaluate_sec03(
        evidence_with(**{"dockle.json": parsed("dockle.json", {"image": "app:latest"})})
    )

    assert verdict.status == ControlStatus.PASS
    assert verdict.details == (
        "dockle.json present and valid "
        "(unable to infer finding levels; treating as informational)"
    )
    assert verdict.details != evaluate_sec03(evidence_with()).details


def test_sec03_pass_with_informational_levels():
    data = {"details": [{"level": "INFO"}, {"level": "PASS"}, {"level": "skip"}]}

    verdict = evaluate_sec03(evidence_with(**{"dockle.json": parsed("dockle.json", data)}))

    assert verdict.status == ControlStatus.PASS
    assert verdict.details == "Dockle scan clean (INFO: 1, PASS: 1, SKIP: 1)"


@pytest.mark.parametrize("level", ["FATAL", "fatl", "ERROR", "warn"])
def test_sec03_fail_on_blocking_levels(level):
    data = {"details": [{"level": level}, {"level": "INFO"}]}

    verdict = evaluate_sec03(evidence_with(**{"dockle.json": parsed("dockle.json", data)}))

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details == f"Dockle reported hardening issues ({level.upper()}: 1, INFO: 1)"


def test_sec03_fail_when_missing_or_invalid():
    assert evaluate_sec03(evidence_with(**{"dockle.json": missing("dockle.json")})).status == (
        ControlStatus.FAIL
    )
    assert evaluate_sec03(evidence_with(**{"dockle.json": invalid("dockle.json")})).status == (
        ControlStatus.FAIL
    )


# SEC-04


def test_sec04_pass_without_critical():
    verdict = evaluate_sec04(
        evidence_with(**{"trivy-image.json": parsed("trivy-image.json", trivy("HIGH", "LOW"))})
    )

    assert verdict.status == ControlStatus.PASS
    assert verdict.details.startswith("No CRITICAL vulnerabilities in Trivy scans. ")


def test_sec04_fail_on_lowercase_critical():
    """Test severities are normalized before counting CRITICAL."""
    verdict = evaluate_sec04(
        evidence_with(**{"trivy-fs.json": parsed("trivy-fs.json", trivy("critical"))})
    )

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details.startswith("CRITICAL vulnerabilities detected. ")
    assert "Trivy FS: total 1, CRITICAL: 1" in verdict.details


def test_sec04_fail_on_critical_in_image():
    verdict = evaluate_sec04(
        evidence_with(**{"trivy-image.json": parsed("trivy-image.json", trivy("CRITICAL"))})
    )

    assert verdict.status == ControlStatus.FAIL


def test_sec04_fail_when_unsummarizable():
    """Test an uninterpretable report fails; zero cannot be confirmed."""
    verdict = evaluate_sec04(
        evidence_with(**{"trivy-fs.json": parsed("trivy-fs.json", {"Results": None})})
    )

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details == "Unable to interpret Trivy JSON structure to count vulnerabilities"


def test_sec04_fail_when_missing_or_invalid():
    verdict = evaluate_sec04(
        evidence_with(
            **{
                "trivy-fs.json": missing("trivy-fs.json"),
                "trivy-image.json": invalid("trivy-image.json"),
            }
        )
    )

    assert verdict.status == ControlStatus.FAIL
    assert verdict.details == "Trivy FS scan missing or invalid; Trivy image scan missing or invalid"


# SEC-05


def test_sec05_pass_on_any_valid_json():
    verdict = evaluate_sec05(evidence_with(**{"sbom.json": parsed("sbom.json", [])}))

    assert verdict.status == ControlStatus.PASS
    assert verdict.details == "sbom.json present and valid (SBOM generated)"


def test_sec05_fail_when_missing_or_invalid():
    assert evaluate_sec05(evidence_with(**{"sbom.json": missing("sbom.json")})).details == (
        "sbom.json not found"
    )
    assert evaluate_sec05(evidence_with(**{"sbom.json": invalid("sbom.json")})).status == (
        ControlStatus.FAIL
    )


# SEC-06


def test_sec06_reflects_write_outcome():
    path = Path("artifacts/compliance-report.md")

    passed = evaluate_sec06(path, written=True)
    failed = evaluate_sec06(path, written=False)

    assert passed.status == ControlStatus.PASS
    assert passed.details == f"Report generated at {path}"
    assert failed.status == ControlStatus.FAIL
    assert failed.details == f"Failed to generate report at {path}"


# Fail-closed across all artifact controls


@pytest.mark.parametrize("make_result", [missing, invalid])
def test_every_control_fails_closed_without_evidence(make_result):
    """Test no artifact-based control passes when its evidence is unusable."""
    results = {artifact.value: make_result(artifact.value) for artifact in ArtifactFile}

    verdicts = evaluate_controls(collect_evidence(results))

    assert len(verdicts) == 5
    assert all(v.status == ControlStatus.FAIL for v in verdicts)
