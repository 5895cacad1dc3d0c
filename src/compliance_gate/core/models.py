"""Data model for compliance evaluation.

Every object here is created once per run and never mutated afterwards.
Summaries distinguish "no data" (None) from "zero findings" (an empty
summary); callers must never collapse the two.

Provides:
- ControlStatus: PASS/FAIL enum
- ArtifactErrorKind: Taxonomy of recoverable evidence failures
- Severity: Known vulnerability severity labels
- VulnerabilitySummary, HardeningSummary, SecretCount: Normalized scanner summaries
- ControlVerdict: Outcome of a single control
- PipelineContext: CI metadata shown in the report
- ComplianceReport: Verdicts plus derived overall status
- compute_overall_status: PASS iff every verdict passed
"""

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

NOT_AVAILABLE = "n/a"


class ControlStatus(str, Enum):
    """Verdict of a control."""

    PASS = "PASS"
    FAIL = "FAIL"


class ArtifactErrorKind(str, Enum):
    """Recoverable failure kinds, each converted into a FAIL verdict.

    NOT_FOUND: Artifact file absent
    INVALID_ENCODING: File present but unreadable or not valid JSON
    UNRECOGNIZED_SCHEMA: Valid JSON in a shape no summarizer recognizes
    PERSISTENCE_FAILURE: The report document could not be written
    """

    NOT_FOUND = "not_found"
    INVALID_ENCODING = "invalid_encoding"
    UNRECOGNIZED_SCHEMA = "unrecognized_schema"
    PERSISTENCE_FAILURE = "persistence_failure"


class Severity(str, Enum):
    """Vulnerability severities in report order."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"


class VulnerabilitySummary(BaseModel):
    """Per-severity vulnerability histogram.

    Attributes:
        counts: Count for each of the five severities (all keys present)
    """

    model_config = ConfigDict(frozen=True)

    counts: dict[Severity, int] = Field(
        default_factory=lambda: {severity: 0 for severity in Severity}
    )

    @model_validator(mode="after")
    def _fill_missing_severities(self) -> "VulnerabilitySummary":
        for severity in Severity:
            self.counts.setdefault(severity, 0)
        return self

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def count(self, severity: Severity) -> int:
        return self.counts.get(severity, 0)

    def format(self, label: str) -> str:
        """Render as e.g. ``Trivy FS: total 3, CRITICAL: 1, HIGH: 2, ...``."""
        parts = ", ".join(f"{severity.value}: {self.count(severity)}" for severity in Severity)
        return f"Trivy {label}: total {self.total}, {parts}"


class HardeningSummary(BaseModel):
    """Histogram of hardening findings by uppercased level.

    Levels are free-form; insertion order follows first appearance in the
    scanner output. An empty ``counts`` means the output was recognized and
    contained no findings.
    """

    model_config = ConfigDict(frozen=True)

    counts: dict[str, int] = Field(default_factory=dict)

    def count(self, *levels: str) -> int:
        return sum(self.counts.get(level, 0) for level in levels)

    def format(self) -> str:
        parts = ", ".join(f"{level}: {n}" for level, n in self.counts.items() if n > 0)
        return parts or "no findings"


class SecretCount(BaseModel):
    """Inferred number of secret findings, or why it could not be inferred."""

    model_config = ConfigDict(frozen=True)

    count: int | float | None = None
    error: str | None = None

    @property
    def determined(self) -> bool:
        return self.error is None and self.count is not None


class ControlVerdict(BaseModel):
    """Outcome of one control.

    Attributes:
        id: Control identifier (SEC-01 .. SEC-06)
        status: PASS or FAIL
        details: Single-line, human-readable explanation
    """

    model_config = ConfigDict(frozen=True)

    id: str
    status: ControlStatus
    details: str

    @property
    def passed(self) -> bool:
        return self.status == ControlStatus.PASS


class PipelineContext(BaseModel):
    """CI metadata for the report header; unknown values read ``n/a``."""

    model_config = ConfigDict(frozen=True)

    commit: str = NOT_AVAILABLE
    ref: str = NOT_AVAILABLE
    repository: str = NOT_AVAILABLE
    run_url: str = NOT_AVAILABLE


def compute_overall_status(verdicts: Iterable[ControlVerdict]) -> ControlStatus:
    """PASS iff every verdict is PASS."""
    if all(verdict.passed for verdict in verdicts):
        return ControlStatus.PASS
    return ControlStatus.FAIL


class ComplianceReport(BaseModel):
    """Ordered verdicts of one run with pipeline metadata.

    The overall status is derived on every access so it can never drift
    from the verdicts it summarizes.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    context: PipelineContext = Field(default_factory=PipelineContext)
    verdicts: tuple[ControlVerdict, ...]

    @property
    def overall_status(self) -> ControlStatus:
        return compute_overall_status(self.verdicts)

    @property
    def failing(self) -> list[ControlVerdict]:
        return [verdict for verdict in self.verdicts if not verdict.passed]
