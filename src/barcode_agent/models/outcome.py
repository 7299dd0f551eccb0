"""
Lookup Outcomes
===============

Tagged outcome of a single catalog lookup.

Every completed lookup produces exactly ONE of:
    - Success: catalog resolved the barcode to a product
    - NotFound: well-formed response, barcode unknown to the catalog
    - HttpError: non-2xx HTTP status
    - EmptyBody: 2xx with an empty response body
    - NetworkError: transport failure or unparseable body

Each variant knows its resolution text, which is what the result sink
shows under the barcode.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


NO_NAME_TEXT = "Product found (no name)"
NOT_FOUND_TEXT = "Not found on Open Food Facts"
EMPTY_BODY_TEXT = "Empty response"
NETWORK_ERROR_TEXT = "Network error"
FIELD_SEPARATOR = " • "


class OutcomeKind(str, Enum):
    """Discriminator for LookupOutcome variants."""

    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"
    EMPTY_BODY = "EMPTY_BODY"
    NETWORK_ERROR = "NETWORK_ERROR"


@dataclass(frozen=True, slots=True)
class Success:
    """Product resolved. Missing fields are empty strings."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.SUCCESS

    name: str = ""
    brand: str = ""
    quantity: str = ""

    @property
    def display_text(self) -> str:
        parts = [p for p in (self.name, self.brand, self.quantity) if p.strip()]
        return FIELD_SEPARATOR.join(parts) if parts else NO_NAME_TEXT


@dataclass(frozen=True, slots=True)
class NotFound:
    kind: ClassVar[OutcomeKind] = OutcomeKind.NOT_FOUND

    @property
    def display_text(self) -> str:
        return NOT_FOUND_TEXT


@dataclass(frozen=True, slots=True)
class HttpError:
    kind: ClassVar[OutcomeKind] = OutcomeKind.HTTP_ERROR

    code: int

    @property
    def display_text(self) -> str:
        return f"Error {self.code}"


@dataclass(frozen=True, slots=True)
class EmptyBody:
    kind: ClassVar[OutcomeKind] = OutcomeKind.EMPTY_BODY

    @property
    def display_text(self) -> str:
        return EMPTY_BODY_TEXT


@dataclass(frozen=True, slots=True)
class NetworkError:
    """Transport failure or malformed body. The message is logged and
    ledgered but never shown."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.NETWORK_ERROR

    message: str = ""

    @property
    def display_text(self) -> str:
        return NETWORK_ERROR_TEXT


LookupOutcome = Union[Success, NotFound, HttpError, EmptyBody, NetworkError]


def format_result(barcode: str, outcome: LookupOutcome) -> str:
    """Build the final result string shown for a completed lookup."""
    return f"{barcode}\n{outcome.display_text}"
