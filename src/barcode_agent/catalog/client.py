"""
Catalog Client
==============

Async Open Food Facts lookup with outcome classification.

Request:
    GET {base_url}/api/v2/product/{barcode}.json

Classification (in order):
    1. Request failure (DNS, connect, timeout, reset,
       undecodable body, redirect loop)                 → NetworkError
    2. Non-2xx status                                   → HttpError{code}
    3. Empty body                                       → EmptyBody
    4. Body is not a JSON object                        → NetworkError
    5. status == "success" or legacy 1                  → Success{name, brand, quantity}
    6. Anything else                                    → NotFound

Every attempt writes exactly one ledger entry BEFORE the outcome is
returned; a Success also appends a product record. Persistence failures are
logged by the stores and never change the outcome. No retries.
"""

import asyncio
import json
import logging
from typing import Any, Optional, Tuple
from urllib.parse import quote

import httpx

from barcode_agent.models.outcome import (
    EmptyBody,
    HttpError,
    LookupOutcome,
    NetworkError,
    NotFound,
    Success,
)
from barcode_agent.models.records import ProductRecord
from barcode_agent.storage.ledger import ResponseLedger
from barcode_agent.storage.product_store import ProductStore


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://world.openfoodfacts.org"


def error_payload(barcode: str, error: str) -> dict:
    """Synthesized ledger body for lookups without a usable document."""
    return {"error": error, "barcode": barcode}


def _is_found(status: Any) -> bool:
    if isinstance(status, bool):
        return False
    return status == "success" or status == 1 or status == "1"


def _text_field(product: dict, key: str) -> str:
    value = product.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def classify_response(
    barcode: str,
    status_code: int,
    body: str,
) -> Tuple[LookupOutcome, Any]:
    """
    Classify a completed HTTP exchange.

    Args:
        barcode: Barcode that was looked up
        status_code: HTTP status code
        body: Decoded response body

    Returns:
        Tuple of (outcome, ledger payload)
    """
    if not 200 <= status_code < 300:
        return HttpError(code=status_code), error_payload(barcode, f"HTTP {status_code}")

    if body == "":
        return EmptyBody(), error_payload(barcode, "Empty response")

    try:
        document = json.loads(body)
    except ValueError as e:
        return NetworkError(message=str(e)), error_payload(barcode, f"Network error: {e}")

    if not isinstance(document, dict):
        message = f"Expected a JSON object, got {type(document).__name__}"
        return NetworkError(message=message), error_payload(barcode, f"Network error: {message}")

    if not _is_found(document.get("status")):
        return NotFound(), document

    product = document.get("product")
    if not isinstance(product, dict):
        product = {}

    outcome = Success(
        name=_text_field(product, "product_name"),
        brand=_text_field(product, "brands"),
        quantity=_text_field(product, "quantity"),
    )
    return outcome, document


class CatalogClient:
    """
    Open Food Facts client that records every attempt.

    Attributes:
        base_url: Catalog service root
        ledger: Response ledger written on every attempt
        store: Product store written on Success
        lookups: Number of lookups performed

    Example:
        async with CatalogClient(ledger, store) as client:
            outcome = await client.lookup("5000112637922")
            print(outcome.display_text)
    """

    def __init__(
        self,
        ledger: ResponseLedger,
        store: ProductStore,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        user_agent: str = "BarcodeLookupAgent/0.1",
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize catalog client.

        Args:
            ledger: Response ledger
            store: Product store
            base_url: Catalog service root URL
            timeout_seconds: Request timeout
            user_agent: User-Agent header value
            http_client: Pre-built client (tests inject a MockTransport here)
        """
        self.base_url = base_url.rstrip("/")
        self.ledger = ledger
        self.store = store
        self.lookups: int = 0

        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )

        logger.info(f"CatalogClient initialized: base_url={self.base_url}")

    def product_url(self, barcode: str) -> str:
        return f"{self.base_url}/api/v2/product/{quote(barcode, safe='')}.json"

    async def lookup(self, barcode: str) -> LookupOutcome:
        """
        Look up a barcode, record the attempt, and classify the result.

        Never raises for network or protocol problems; any httpx.HTTPError
        becomes a NetworkError, status and body problems become HttpError /
        EmptyBody outcomes.

        Args:
            barcode: Selected barcode value

        Returns:
            Exactly one LookupOutcome variant
        """
        self.lookups += 1
        url = self.product_url(barcode)
        logger.info(f"Looking up {barcode}")

        try:
            response = await self._http.get(url)
            outcome, payload = classify_response(barcode, response.status_code, response.text)
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            outcome, payload = NetworkError(message=message), error_payload(
                barcode, f"Network error: {message}"
            )

        await self._record(barcode, outcome, payload)
        self._log_outcome(barcode, outcome)
        return outcome

    async def _record(self, barcode: str, outcome: LookupOutcome, payload: Any) -> None:
        await asyncio.to_thread(self._persist, barcode, outcome, payload)

    def _persist(self, barcode: str, outcome: LookupOutcome, payload: Any) -> None:
        entry = self.ledger.new_entry(barcode, payload)
        self.ledger.append(entry)

        if isinstance(outcome, Success):
            self.store.append(
                ProductRecord(
                    barcode=barcode,
                    name=outcome.name,
                    brand=outcome.brand,
                    quantity=outcome.quantity,
                )
            )

    def _log_outcome(self, barcode: str, outcome: LookupOutcome) -> None:
        if isinstance(outcome, Success):
            logger.info(f"{barcode}: found '{outcome.display_text}'")
        elif isinstance(outcome, NotFound):
            logger.info(f"{barcode}: not found in catalog")
        elif isinstance(outcome, NetworkError):
            logger.warning(f"{barcode}: network error: {outcome.message}")
        else:
            logger.warning(f"{barcode}: {outcome.display_text}")

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
