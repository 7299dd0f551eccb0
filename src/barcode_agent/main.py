"""
BarcodeLookupAgent Main Application
===================================

FastAPI entry point for the scan-to-result service.

Startup wires:
    FrameConsumer → LatestFrameSlot → ScanPipeline
        → CatalogClient → {ResponseLedger, ProductStore} → DisplayState

Endpoints:
    GET  /          - Service information
    GET  /health    - Liveness probe
    GET  /ready     - Readiness probe (stream connected + pipeline running?)
    GET  /metrics   - Stream, gate, pipeline and storage counters
    GET  /result    - Current result text
    POST /reset     - Re-arm scanning and clear the result
    GET  /files     - Raw contents of the ledger and product store
    POST /export    - Copy both files to the export directory
    WS   /ws/result - Real-time result stream
"""

import asyncio
import logging
import os
import signal
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, WebSocket
from fastapi.responses import JSONResponse

from barcode_agent.catalog import CatalogClient
from barcode_agent.config import settings
from barcode_agent.pipeline import DisplayState, ScanPipeline
from barcode_agent.scanning import BarcodeDetector, MockDetector, PyzbarDetector, _PYZBAR_AVAILABLE
from barcode_agent.storage import (
    ExportError,
    ProductStore,
    ResponseLedger,
    export_files,
    read_file_contents,
)
from barcode_agent.stream import FrameConsumer, LatestFrameSlot


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_shutdown_flag: bool = False

_frame_slot: Optional[LatestFrameSlot] = None
_frame_consumer: Optional[FrameConsumer] = None
_consumer_task: Optional[asyncio.Task] = None

_ledger: Optional[ResponseLedger] = None
_product_store: Optional[ProductStore] = None
_catalog: Optional[CatalogClient] = None
_display: Optional[DisplayState] = None
_pipeline: Optional[ScanPipeline] = None
_pipeline_task: Optional[asyncio.Task] = None

_startup_time: float = 0.0


# =============================================================================
# Getters
# =============================================================================

def get_pipeline() -> Optional[ScanPipeline]:
    return _pipeline

def get_display() -> Optional[DisplayState]:
    return _display

def get_frame_consumer() -> Optional[FrameConsumer]:
    return _frame_consumer

def get_frame_slot() -> Optional[LatestFrameSlot]:
    return _frame_slot


# =============================================================================
# Signal Handlers
# =============================================================================

def _handle_sigterm(signum, frame):
    """Handle SIGTERM for graceful shutdown."""
    global _shutdown_flag
    logger.info("Received SIGTERM, initiating graceful shutdown...")
    _shutdown_flag = True
    if _pipeline is not None:
        _pipeline.stop()


# =============================================================================
# Detector Factory
# =============================================================================

def create_detector() -> BarcodeDetector:
    """
    Create barcode detector based on config.

    Fails fast if the pyzbar backend is requested but unavailable.
    """
    backend = settings.detector.backend

    if backend == "mock":
        logger.info("Using MockDetector")
        return MockDetector(values=settings.detector.mock.values)

    elif backend == "pyzbar":
        if not _PYZBAR_AVAILABLE:
            raise RuntimeError(
                "pyzbar backend requested but pyzbar/zbar is not installed. "
                "Install with: pip install pyzbar (and the zbar shared library)"
            )
        logger.info("Using PyzbarDetector")
        return PyzbarDetector()

    else:
        raise ValueError(f"Unknown detector backend: {backend}")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _frame_slot, _frame_consumer, _consumer_task
    global _ledger, _product_store, _catalog, _display
    global _pipeline, _pipeline_task, _startup_time, _shutdown_flag

    try:
        signal.signal(signal.SIGTERM, _handle_sigterm)
    except ValueError:
        # Not the main thread (e.g. under a test client)
        logger.debug("SIGTERM handler not installed")

    _startup_time = time.time()
    _shutdown_flag = False
    logger.info(f"Starting {settings.agent.name} {settings.agent.version}")

    # Storage
    _ledger = ResponseLedger(settings.storage.ledger_path)
    _product_store = ProductStore(settings.storage.products_path)
    logger.info(f"Ledger: {_ledger.path}, products: {_product_store.path}")

    # Catalog
    _catalog = CatalogClient(
        ledger=_ledger,
        store=_product_store,
        base_url=settings.catalog.base_url,
        timeout_seconds=settings.catalog.timeout_seconds,
        user_agent=settings.catalog.user_agent,
    )

    # Pipeline
    _display = DisplayState()
    _pipeline = ScanPipeline(
        detector=create_detector(),
        catalog=_catalog,
        sink=_display,
    )

    # Frame intake
    logger.info(f"Stream URL: {settings.stream.url}")
    _frame_slot = LatestFrameSlot()
    _frame_consumer = FrameConsumer(
        url=settings.stream.url,
        slot=_frame_slot,
        reconnect_backoff_ms=settings.stream.reconnect_backoff_ms,
    )
    _consumer_task = asyncio.create_task(
        _frame_consumer.run(),
        name="frame_consumer"
    )
    _pipeline_task = asyncio.create_task(
        _pipeline.run(_frame_slot),
        name="scan_pipeline"
    )

    logger.info("All components started")

    yield

    logger.info("Shutting down gracefully...")
    _shutdown_flag = True

    if _frame_consumer:
        await _frame_consumer.stop()

    if _consumer_task:
        try:
            await asyncio.wait_for(_consumer_task, timeout=5.0)
        except asyncio.TimeoutError:
            _consumer_task.cancel()
            try:
                await _consumer_task
            except asyncio.CancelledError:
                pass

    if _pipeline:
        _pipeline.close()
        await _pipeline.drain(timeout=settings.catalog.timeout_seconds)

    if _pipeline_task:
        _pipeline_task.cancel()
        try:
            await _pipeline_task
        except asyncio.CancelledError:
            pass

    if _catalog:
        await _catalog.aclose()

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="BarcodeLookupAgent",
    description="Scan-to-result barcode lookup service",
    version=settings.agent.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "BarcodeLookupAgent",
        "version": settings.agent.version,
        "name": settings.agent.name,
        "status": "running",
        "detector_backend": settings.detector.backend,
        "catalog": settings.catalog.base_url,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness probe - can the service scan?

    Returns 200 if the frame stream is connected and the pipeline is open.
    Returns 503 otherwise.
    """
    consumer = get_frame_consumer()
    pipeline = get_pipeline()

    stream_connected = consumer.connected if consumer else False
    pipeline_ready = pipeline is not None and not pipeline.closed

    body = {
        "stream_connected": stream_connected,
        "pipeline_ready": pipeline_ready,
    }
    if stream_connected and pipeline_ready:
        return JSONResponse({"status": "ready", **body})
    return JSONResponse({"status": "not_ready", **body}, status_code=503)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    consumer = get_frame_consumer()
    slot = get_frame_slot()
    pipeline = get_pipeline()

    stream_metrics = {}
    if consumer and slot:
        stream_metrics = {
            "stream_connected": consumer.connected,
            **consumer.metrics.to_dict(),
            "slot_dropped": slot.dropped_count,
        }

    storage_metrics = {}
    if _ledger and _product_store:
        storage_metrics = {
            "ledger_failures": _ledger.failures,
            "product_store_failures": _product_store.failures,
        }

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "detector_backend": settings.detector.backend,
        **stream_metrics,
        **(pipeline.metrics_dict() if pipeline else {}),
        **storage_metrics,
    })


@app.get("/result")
async def result() -> JSONResponse:
    """Current result text."""
    display = get_display()
    pipeline = get_pipeline()
    if display is None or pipeline is None:
        return JSONResponse({"error": "Pipeline not started"}, status_code=503)

    return JSONResponse({
        **display.snapshot(),
        "scan_state": pipeline.debouncer.state.value,
    })


@app.post("/reset")
async def reset() -> JSONResponse:
    """Re-arm scanning. A no-op if the scanner is already ready."""
    pipeline = get_pipeline()
    if pipeline is None:
        return JSONResponse({"error": "Pipeline not started"}, status_code=503)

    changed = pipeline.reset()
    return JSONResponse({
        "reset": changed,
        "scan_state": pipeline.debouncer.state.value,
    })


@app.get("/files")
async def files() -> JSONResponse:
    """Raw contents of the stored files."""
    return JSONResponse(
        read_file_contents(settings.storage.ledger_path, settings.storage.products_path)
    )


@app.post("/export")
async def export() -> JSONResponse:
    """Copy the stored files to the export directory."""
    directory = Path(settings.export.directory)
    try:
        exported = await asyncio.to_thread(
            export_files,
            settings.storage.ledger_path,
            settings.storage.products_path,
            directory,
        )
    except ExportError as e:
        logger.error(str(e))
        return JSONResponse({"error": f"Export failed: {e}"}, status_code=500)

    return JSONResponse({
        "directory": str(directory.expanduser()),
        "files": [str(p) for p in exported],
    })


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/result")
async def result_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint pushing the result whenever it changes."""
    await websocket.accept()
    logger.info("Client connected to /ws/result")

    last_version = -1
    try:
        while not _shutdown_flag:
            display = get_display()
            if display is not None and display.version != last_version:
                snapshot = display.snapshot()
                last_version = snapshot["version"]
                await websocket.send_json(snapshot)
            await asyncio.sleep(0.25)

    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        logger.info("Client disconnected from /ws/result")


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Console entry point."""
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "barcode_agent.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
