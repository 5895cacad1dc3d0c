"""Trivy vulnerability summarizer.

Counts vulnerabilities per severity from Trivy's JSON report. Only the
``{"Results": [{"Vulnerabilities": [...]}, ...]}`` shape is recognized;
anything else is "summary unavailable", never a zero summary.
"""

from typing import Any

from compliance_gate.core.models import Severity, VulnerabilitySummary
from compliance_gate.summarizers.base import SchemaVariant, decode_first, is_array, is_object

KNOWN_SEVERITIES = {severity.value for severity in Severity}


def normalize_severity(raw: Any) -> Severity:
    """Map a raw severity label to a known Severity, case-insensitively.

    Missing, empty, or unrecognized labels fold into UNKNOWN.
    """
    if not raw:
        return Severity.UNKNOWN
    label = str(raw).upper()
    if label not in KNOWN_SEVERITIES:
        return Severity.UNKNOWN
    return Severity(label)


def _decode_trivy_results(data: Any) -> VulnerabilitySummary | None:
    if not is_object(data) or not is_array(data.get("Results")):
        return None

    counts = {severity: 0 for severity in Severity}
    for result in data["Results"]:
        if not is_object(result) or not is_array(result.get("Vulnerabilities")):
            continue
        for vuln in result["Vulnerabilities"]:
            raw = vuln.get("Severity") if is_object(vuln) else None
            counts[normalize_severity(raw)] += 1

    return VulnerabilitySummary(counts=counts)


TRIVY_VARIANTS = (
    SchemaVariant(name="trivy-results", decode=_decode_trivy_results),
)


def summarize_vulnerabilities(data: Any) -> VulnerabilitySummary | None:
    """Summarize a parsed Trivy report.

    Args:
        data: Parsed JSON of unknown shape

    Returns:
        VulnerabilitySummary, or None when the shape is not recognized

    Example:
        >>> summary = summarize_vulnerabilities(
        ...     {"Results": [{"Vulnerabilities": [{"Severity": "critical"}]}]}
        ... )
        >>> summary.count(Severity.CRITICAL), summary.total
        (1, 1)
    """
    decoded = decode_first(TRIVY_VARIANTS, data)
    return decoded.value if decoded else None
