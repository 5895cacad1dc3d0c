"""Gitleaks finding counter.

Gitleaks reports a bare array of findings, but wrappers and older releases
nest the array under a key or only report a total. An unrecognized shape
is an error, never "zero findings".
"""

import math
from typing import Any

from compliance_gate.core.models import SecretCount
from compliance_gate.summarizers.base import SchemaVariant, decode_first, is_array, is_object

FINDINGS_ALIASES = ("findings", "Leaks", "leaks", "results")

UNKNOWN_STRUCTURE = "Unknown Gitleaks JSON structure (no findings array found)"


def _decode_bare_list(data: Any) -> int | None:
    return len(data) if is_array(data) else None


def _decode_findings_array(data: Any) -> int | None:
    if not is_object(data):
        return None
    for alias in FINDINGS_ALIASES:
        if is_array(data.get(alias)):
            return len(data[alias])
    return None


def _decode_numeric_total(data: Any) -> int | float | None:
    if not is_object(data):
        return None
    total = data.get("total")
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return None
    if isinstance(total, float) and not math.isfinite(total):
        return None
    if total < 0:
        return None
    return total


GITLEAKS_VARIANTS = (
    SchemaVariant(name="bare-list", decode=_decode_bare_list),
    SchemaVariant(name="findings-array", decode=_decode_findings_array),
    SchemaVariant(name="numeric-total", decode=_decode_numeric_total),
)


def count_secret_findings(data: Any) -> SecretCount:
    """Infer how many secrets Gitleaks reported.

    Args:
        data: Parsed JSON of unknown shape

    Returns:
        SecretCount with ``count`` set, or with ``error`` when the shape is
        not recognized
    """
    decoded = decode_first(GITLEAKS_VARIANTS, data)
    if decoded is None:
        return SecretCount(error=UNKNOWN_STRUCTURE)
    return SecretCount(count=decoded.value)
