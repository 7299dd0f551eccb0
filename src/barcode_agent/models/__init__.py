"""
Data Models
===========

Models for the BarcodeLookupAgent.

Models:
    Input:
        - FrameMessage: Schema for messages from the frame source

    State:
        - ScanState: Debouncer states (READY, LOCKED)

    Outcome:
        - LookupOutcome: Success | NotFound | HttpError | EmptyBody | NetworkError
        - OutcomeKind: Variant discriminator

    Records:
        - LedgerEntry: One catalog interaction
        - ProductRecord: One resolved product
"""

from barcode_agent.models.input import FrameMessage
from barcode_agent.models.state import ScanState
from barcode_agent.models.outcome import (
    EmptyBody,
    HttpError,
    LookupOutcome,
    NetworkError,
    NotFound,
    OutcomeKind,
    Success,
    format_result,
)
from barcode_agent.models.records import LedgerEntry, ProductRecord

__all__ = [
    # Input
    "FrameMessage",
    # State
    "ScanState",
    # Outcome
    "OutcomeKind",
    "LookupOutcome",
    "Success",
    "NotFound",
    "HttpError",
    "EmptyBody",
    "NetworkError",
    "format_result",
    # Records
    "LedgerEntry",
    "ProductRecord",
]
