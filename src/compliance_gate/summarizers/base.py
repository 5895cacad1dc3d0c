"""Schema-variant decoding shared by the summarizers.

Scanner outputs are loosely specified and change shape between versions.
Each summarizer declares an ordered tuple of SchemaVariant entries, one per
recognized shape. A variant's ``decode`` returns None when the value is not
in its shape; the first (or, for merging summarizers, every) variant that
matches produces the summary, and no match is the explicit "unrecognized"
terminal state.

Provides:
- SchemaVariant: A named, recognized JSON shape with its decoder
- Decoded: Value produced by a matching variant, tagged with its name
- decode_first: Priority-ordered decode (first match wins)
- decode_all: Independent decode of every variant (all matches returned)
- is_object, is_array: JSON type predicates
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SchemaVariant(Generic[T]):
    """A recognized shape of a scanner's JSON output."""

    name: str
    decode: Callable[[Any], T | None]


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Result of a matching variant."""

    variant: str
    value: T


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def is_array(value: Any) -> bool:
    return isinstance(value, list)


def decode_first(variants: tuple[SchemaVariant[T], ...], data: Any) -> Decoded[T] | None:
    """Try variants in priority order.

    Args:
        variants: Ordered variants, highest priority first
        data: Parsed JSON value of unknown shape

    Returns:
        Decoded value of the first matching variant, or None if unrecognized
    """
    for variant in variants:
        value = variant.decode(data)
        if value is not None:
            return Decoded(variant=variant.name, value=value)
    return None


def decode_all(variants: tuple[SchemaVariant[T], ...], data: Any) -> list[Decoded[T]]:
    """Try every variant independently and return all matches in order."""
    matches = []
    for variant in variants:
        value = variant.decode(data)
        if value is not None:
            matches.append(Decoded(variant=variant.name, value=value))
    return matches
