"""
Write Results
=============

Explicit outcome of a persistence call.

Storage writes never raise into the lookup path. Instead they return a
WriteResult that the caller may count or inspect; the failure itself has
already been logged by the store.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class WriteResult:
    """
    Attributes:
        ok: Whether the record reached the storage medium
        error: Description of the failure when ok is False
    """

    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "WriteResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException) -> "WriteResult":
        return cls(ok=False, error=f"{type(error).__name__}: {error}")
