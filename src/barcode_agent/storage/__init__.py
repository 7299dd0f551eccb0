"""
Storage Module
==============

Durable records of catalog lookups.

Components:
    - ResponseLedger: Whole-document JSON ledger of every lookup attempt
    - ProductStore: JSON Lines log of resolved products
    - WriteResult: Explicit persistence outcome (writes never raise)
    - export_files / read_file_contents: Export and display helpers
"""

from barcode_agent.storage.result import WriteResult
from barcode_agent.storage.ledger import LedgerCorruptError, ResponseLedger, now_ms
from barcode_agent.storage.product_store import ProductStore
from barcode_agent.storage.export import (
    EXPORTED_LEDGER_NAME,
    EXPORTED_PRODUCTS_NAME,
    NO_PRODUCTS_TEXT,
    NO_RESPONSES_TEXT,
    ExportError,
    export_files,
    read_file_contents,
)

__all__ = [
    "WriteResult",
    "ResponseLedger",
    "LedgerCorruptError",
    "now_ms",
    "ProductStore",
    "ExportError",
    "export_files",
    "read_file_contents",
    "EXPORTED_LEDGER_NAME",
    "EXPORTED_PRODUCTS_NAME",
    "NO_RESPONSES_TEXT",
    "NO_PRODUCTS_TEXT",
]
