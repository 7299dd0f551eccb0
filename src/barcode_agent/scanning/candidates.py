"""
Candidate Selection
===================

Picks the single barcode value to act on from one frame's decode hits.

Policy:
    1. First candidate whose whole value is decimal digits (retail codes)
    2. Otherwise the first candidate of any kind
    3. None for an empty list

Deterministic and order preserving: first match wins, no scoring.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True, slots=True)
class Candidate:
    """
    Raw value emitted by the decode primitive.

    Attributes:
        value: Decoded payload
        is_numeric: True if value is non-empty and all ASCII digits
    """

    value: str
    is_numeric: bool

    @classmethod
    def from_raw(cls, value: str) -> "Candidate":
        return cls(value=value, is_numeric=is_numeric_value(value))


def is_numeric_value(value: str) -> bool:
    """ASCII digits only; '²' and friends do not count."""
    return bool(value) and value.isascii() and value.isdigit()


def to_candidates(values: Iterable[str]) -> List[Candidate]:
    return [Candidate.from_raw(v) for v in values]


def select(candidates: List[Candidate]) -> Optional[str]:
    """
    Choose the barcode value for a frame.

    Args:
        candidates: Decode hits in the order the detector reported them

    Returns:
        The chosen value, or None if there were no candidates.
    """
    for candidate in candidates:
        if candidate.is_numeric:
            return candidate.value
    if candidates:
        return candidates[0].value
    return None
