"""
Stored Records
==============

Pydantic models for the two persisted record types.

LedgerEntry:
    One per lookup attempt, success or failure. `api_response` holds the
    raw catalog document, or a synthesized error object such as
    {"error": "HTTP 404", "barcode": "0000000000000"}.

ProductRecord:
    One per successful lookup. Not deduplicated by barcode.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LedgerEntry(BaseModel):
    """Immutable record of a single catalog interaction."""

    model_config = ConfigDict(frozen=True)

    barcode: str = Field(..., description="Barcode value that was looked up")
    timestamp: int = Field(..., ge=0, description="Milliseconds since epoch")
    api_response: Any = Field(
        ...,
        description="Raw JSON document or synthesized error object",
    )


class ProductRecord(BaseModel):
    """Product resolved from a successful lookup."""

    model_config = ConfigDict(frozen=True)

    barcode: str
    name: str = ""
    brand: str = ""
    quantity: str = ""
