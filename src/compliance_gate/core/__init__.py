"""Core compliance gate functionality.

Provides:
- Data model for verdicts, summaries and reports
- Environment-driven configuration
"""

from .config import Config, load_config
from .models import (
    ArtifactErrorKind,
    ComplianceReport,
    ControlStatus,
    ControlVerdict,
    HardeningSummary,
    PipelineContext,
    SecretCount,
    Severity,
    VulnerabilitySummary,
    compute_overall_status,
)

__all__ = [
    "Config",
    "load_config",
    "ArtifactErrorKind",
    "ComplianceReport",
    "ControlStatus",
    "ControlVerdict",
    "HardeningSummary",
    "PipelineContext",
    "SecretCount",
    "Severity",
    "VulnerabilitySummary",
    "compute_overall_status",
]
