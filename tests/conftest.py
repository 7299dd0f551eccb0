"""
Test Configuration
==================

Pytest fixtures and test configuration for BarcodeLookupAgent.

The service settings are loaded on import, so the environment is pointed
at throwaway locations before any test module imports the application.
"""

import json
import os
import tempfile

import httpx
import pytest

_TEST_ROOT = tempfile.mkdtemp(prefix="barcode-agent-tests-")
os.environ.setdefault("BARCODE_DETECTOR_BACKEND", "mock")
os.environ.setdefault("BARCODE_STREAM_URL", "ws://127.0.0.1:9/ws/frames")
os.environ.setdefault("BARCODE_CATALOG_URL", "http://127.0.0.1:9")
os.environ.setdefault("BARCODE_DATA_DIR", os.path.join(_TEST_ROOT, "data"))
os.environ.setdefault("BARCODE_EXPORT_DIR", os.path.join(_TEST_ROOT, "exports"))

from barcode_agent.catalog import CatalogClient
from barcode_agent.storage import ProductStore, ResponseLedger
from barcode_agent.stream import Frame


COCA_COLA_BODY = {
    "code": "5000112637922",
    "status": "success",
    "product": {
        "product_name": "Coca-Cola",
        "brands": "Coca-Cola",
        "quantity": "330ml",
    },
}


class FakeDetector:
    """Detector returning fixed values, or raising if configured to."""

    def __init__(self, values=None, error=None, delay=0.0):
        self.values = list(values or [])
        self.error = error
        self.delay = delay
        self.calls = 0

    def detect(self, frame):
        self.calls += 1
        if self.delay:
            import time
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.values)


class RecordingSink:
    """Result sink that keeps every string it was shown."""

    def __init__(self):
        self.shown = []
        self.cleared = 0

    def show(self, text):
        self.shown.append(text)

    def clear(self):
        self.cleared += 1

    @property
    def last(self):
        return self.shown[-1] if self.shown else None


def make_frame(frame_id: int = 1, image: str = "aW1hZ2U=", rotation: int = 0) -> Frame:
    return Frame(
        frame_id=frame_id,
        timestamp=1707321234.5 + frame_id,
        image_b64=image,
        rotation_degrees=rotation,
    )


def json_response(body, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode("utf-8"))


@pytest.fixture
def ledger(tmp_path):
    return ResponseLedger(tmp_path / "api_responses.json")


@pytest.fixture
def product_store(tmp_path):
    return ProductStore(tmp_path / "products.json")


@pytest.fixture
def catalog_factory(ledger, product_store):
    """Build a CatalogClient whose HTTP traffic goes to `handler`."""

    def factory(handler):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return CatalogClient(ledger, product_store, http_client=http)

    return factory


@pytest.fixture
def coca_cola_handler():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return json_response(COCA_COLA_BODY)

    handler.calls = calls
    return handler
