"""
BarcodeLookupAgent
==================

Scan-to-result pipeline for retail barcodes.

This package consumes a stream of camera frames, decodes exactly one barcode
per physical item, looks it up against the Open Food Facts catalog, records
every lookup attempt in an append-only ledger, and publishes a human-readable
result.

Components:
    - stream: Frame model, latest-frame slot, frame gate, WebSocket consumer
    - scanning: Candidate selection, scan debouncer, barcode detectors
    - catalog: Async Open Food Facts client and outcome classification
    - storage: Response ledger, product store, file export
    - pipeline: ScanPipeline orchestration and result sink

Example:
    from barcode_agent.config import settings
    from barcode_agent.pipeline import ScanPipeline

    # Pipeline is started via FastAPI application
    # See main.py for entry point
"""

__version__ = "0.1.0"
__author__ = "BarcodeLookupAgent Project"

__all__ = [
    "__version__",
]
