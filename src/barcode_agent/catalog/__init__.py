"""
Catalog Module
==============

Open Food Facts lookup.

Components:
    - CatalogClient: Async client that ledgers every attempt
    - classify_response: Pure HTTP-exchange → LookupOutcome classification
"""

from barcode_agent.catalog.client import (
    DEFAULT_BASE_URL,
    CatalogClient,
    classify_response,
    error_payload,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "CatalogClient",
    "classify_response",
    "error_payload",
]
