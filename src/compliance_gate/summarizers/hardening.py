"""Dockle hardening summarizer.

Dockle's JSON has shipped in several layouts. Three are recognized and
merged, since an object may carry both a ``details`` array and its own
``level``:

- finding-list: ``[{"level": "WARN", "details": [{"level": "INFO"}]}, ...]``
- details-object: ``{"details": [{"level": "FATAL"}, ...]}``
- single-level: ``{"level": "PASS"}``

Levels are uppercased before counting.
"""

from collections import Counter
from typing import Any

from compliance_gate.core.models import HardeningSummary
from compliance_gate.summarizers.base import SchemaVariant, decode_all, is_array, is_object

# Levels that fail the hardening control ("FATL" is Dockle's abbreviation)
BLOCKING_LEVELS = ("FATAL", "FATL", "ERROR", "WARN")


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, (dict, list))


def _level_of(entry: Any) -> str | None:
    if not is_object(entry):
        return None
    level = entry.get("level")
    if not level or not _is_scalar(level):
        return None
    if isinstance(level, float) and level.is_integer():
        level = int(level)
    return str(level).upper()


def _levels_of(entries: list) -> list[str]:
    return [level for level in map(_level_of, entries) if level]


def _decode_finding_list(data: Any) -> list[str] | None:
    if not is_array(data):
        return None

    levels = []
    for item in data:
        if level := _level_of(item):
            levels.append(level)
        if is_object(item) and is_array(item.get("details")):
            levels.extend(_levels_of(item["details"]))
    return levels


def _decode_details_object(data: Any) -> list[str] | None:
    if not is_object(data) or not is_array(data.get("details")):
        return None
    return _levels_of(data["details"])


def _decode_single_level(data: Any) -> list[str] | None:
    if not is_object(data) or "level" not in data or not _is_scalar(data["level"]):
        return None
    level = _level_of(data)
    return [level] if level else []


DOCKLE_VARIANTS = (
    SchemaVariant(name="finding-list", decode=_decode_finding_list),
    SchemaVariant(name="details-object", decode=_decode_details_object),
    SchemaVariant(name="single-level", decode=_decode_single_level),
)


def summarize_hardening(data: Any) -> HardeningSummary | None:
    """Count Dockle findings per level.

    Args:
        data: Parsed JSON of unknown shape

    Returns:
        HardeningSummary (empty counts when recognized but clean), or None
        when no recognized shape applies
    """
    matches = decode_all(DOCKLE_VARIANTS, data)
    if not matches:
        return None

    counts = Counter()
    for match in matches:
        counts.update(match.value)
    return HardeningSummary(counts=dict(counts))
