"""Normalizers turning raw scanner JSON into small numeric summaries.

Provides:
- Schema-variant decoding infrastructure
- summarize_vulnerabilities: Trivy severity histogram
- summarize_hardening: Dockle level histogram
- count_secret_findings: Gitleaks finding count
"""

from .base import Decoded, SchemaVariant, decode_all, decode_first
from .hardening import BLOCKING_LEVELS, summarize_hardening
from .secrets import count_secret_findings
from .vulnerabilities import normalize_severity, summarize_vulnerabilities

__all__ = [
    "Decoded",
    "SchemaVariant",
    "decode_all",
    "decode_first",
    "BLOCKING_LEVELS",
    "summarize_hardening",
    "count_secret_findings",
    "normalize_severity",
    "summarize_vulnerabilities",
]
