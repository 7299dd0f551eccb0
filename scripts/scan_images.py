#!/usr/bin/env python3
"""
Image Replay Script
===================

Standalone script that pushes still images through the scan pipeline.

This script:
    1. Wraps each image file as a frame
    2. Runs it through FrameGate → detector → debouncer → catalog lookup
    3. Resets the scanner between images (one scan per image)
    4. Prints each result and a final summary

Prerequisites:
    - pyzbar and the zbar shared library (or use --mock)
    - Network access to the catalog service

Usage:
    python scripts/scan_images.py photos/*.jpg
    python scripts/scan_images.py --mock 5000112637922 --data-dir /tmp/scans any.jpg
"""

import argparse
import asyncio
import base64
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from barcode_agent.catalog import CatalogClient, DEFAULT_BASE_URL
from barcode_agent.pipeline import DisplayState, ScanPipeline
from barcode_agent.scanning import MockDetector, PyzbarDetector, _PYZBAR_AVAILABLE
from barcode_agent.storage import ProductStore, ResponseLedger
from barcode_agent.stream import Frame


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def load_frame(path: Path, frame_id: int, rotation: int) -> Frame:
    return Frame(
        frame_id=frame_id,
        timestamp=time.time(),
        image_b64=base64.b64encode(path.read_bytes()).decode("ascii"),
        rotation_degrees=rotation,
    )


async def run_scan(
    images: List[Path],
    data_dir: Path,
    base_url: str,
    rotation: int,
    mock_value: Optional[str],
) -> dict:
    """
    Scan every image once.

    Returns:
        Summary dict
    """
    if mock_value:
        detector = MockDetector([mock_value])
    elif _PYZBAR_AVAILABLE:
        detector = PyzbarDetector()
    else:
        raise SystemExit("pyzbar is not available; pass --mock VALUE instead")

    ledger = ResponseLedger(data_dir / "api_responses.json")
    store = ProductStore(data_dir / "products.json")
    display = DisplayState()

    scanned = 0
    async with CatalogClient(ledger, store, base_url=base_url) as catalog:
        pipeline = ScanPipeline(detector=detector, catalog=catalog, sink=display)
        try:
            for frame_id, image in enumerate(images):
                frame = load_frame(image, frame_id, rotation)
                if await pipeline.process_frame(frame):
                    await pipeline.drain()
                    scanned += 1
                    print(f"--- {image.name}\n{display.display_text}")
                else:
                    print(f"--- {image.name}\n(no barcode)")
                pipeline.reset()
        finally:
            pipeline.close()

    logger.info("=" * 60)
    logger.info(f"Images: {len(images)}, scanned: {scanned}")
    logger.info(f"Pipeline: {pipeline.metrics.to_dict()}")
    logger.info(f"Ledger: {ledger.path} ({ledger.failures} write failures)")
    logger.info("=" * 60)

    return {
        "images": len(images),
        "scanned": scanned,
        "ledger_failures": ledger.failures,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Push image files through the barcode scan pipeline"
    )
    parser.add_argument("images", nargs="+", type=Path, help="JPEG/PNG files to scan")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(os.environ.get("BARCODE_DATA_DIR", "./data")),
        help="Directory for the ledger and product store",
    )
    parser.add_argument(
        "--catalog-url",
        type=str,
        default=os.environ.get("BARCODE_CATALOG_URL", DEFAULT_BASE_URL),
        help="Catalog service root URL",
    )
    parser.add_argument(
        "--rotation",
        type=int,
        default=0,
        choices=[0, 90, 180, 270],
        help="Rotation hint applied to every image",
    )
    parser.add_argument(
        "--mock",
        type=str,
        default=None,
        metavar="VALUE",
        help="Skip decoding and report VALUE for every image",
    )

    args = parser.parse_args()

    missing = [p for p in args.images if not p.exists()]
    if missing:
        parser.error(f"missing files: {', '.join(str(p) for p in missing)}")

    summary = asyncio.run(
        run_scan(args.images, args.data_dir, args.catalog_url, args.rotation, args.mock)
    )
    sys.exit(0 if summary["scanned"] > 0 else 1)


if __name__ == "__main__":
    main()
