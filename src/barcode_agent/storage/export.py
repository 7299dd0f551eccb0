"""
File Export
===========

Copies the ledger and product store verbatim to a public directory under
fixed names, and renders both files for display.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, List


logger = logging.getLogger(__name__)


EXPORTED_LEDGER_NAME = "barcode_scanner_api_responses.json"
EXPORTED_PRODUCTS_NAME = "barcode_scanner_products.json"

NO_RESPONSES_TEXT = "No API responses saved yet"
NO_PRODUCTS_TEXT = "No products saved yet"


class ExportError(Exception):
    """Raised when exported files cannot be written."""
    pass


def export_files(ledger_path: Path, products_path: Path, directory: Path) -> List[Path]:
    """
    Copy both stored files into `directory`, overwriting earlier exports.

    Missing source files are skipped.

    Args:
        ledger_path: Response ledger file
        products_path: Product store file
        directory: Destination, created if missing (`~` is expanded)

    Returns:
        Paths of the files written

    Raises:
        ExportError: If the directory or a copy cannot be written
    """
    destination = Path(directory).expanduser()
    exported: List[Path] = []

    try:
        destination.mkdir(parents=True, exist_ok=True)
        for source, name in (
            (Path(ledger_path), EXPORTED_LEDGER_NAME),
            (Path(products_path), EXPORTED_PRODUCTS_NAME),
        ):
            if not source.exists():
                logger.info(f"Export skipped, {source} does not exist")
                continue
            target = destination / name
            shutil.copyfile(source, target)
            exported.append(target)
    except OSError as e:
        raise ExportError(f"Export to {destination} failed: {e}") from e

    logger.info(f"Exported {len(exported)} file(s) to {destination}")
    return exported


def read_file_contents(ledger_path: Path, products_path: Path) -> Dict[str, str]:
    """
    Raw text of both stored files, with placeholders for missing ones.

    Returns:
        {"api_responses": ..., "products": ...}
    """
    ledger_path = Path(ledger_path)
    products_path = Path(products_path)
    return {
        "api_responses": (
            ledger_path.read_text(encoding="utf-8") if ledger_path.exists() else NO_RESPONSES_TEXT
        ),
        "products": (
            products_path.read_text(encoding="utf-8") if products_path.exists() else NO_PRODUCTS_TEXT
        ),
    }
