"""
Product Store
=============

Best-effort log of products resolved by successful lookups.

File Format:
    JSON Lines, one ProductRecord object per line:
        {"barcode": "5000112637922", "name": "Coca-Cola", "brand": "Coca-Cola", "quantity": "330ml"}

Older files written as back-to-back objects with no separator are still
readable by `records()`; new appends always end with a newline.
"""

import json
import logging
import threading
from pathlib import Path
from typing import List, Optional

from barcode_agent.models.records import ProductRecord
from barcode_agent.storage.result import WriteResult


logger = logging.getLogger(__name__)


class ProductStore:
    """
    Append-only product record file. Not deduplicated by barcode.

    Attributes:
        path: Store file location
        failures: Number of appends that did not reach disk
    """

    def __init__(self, path: Path, log: Optional[logging.Logger] = None) -> None:
        self.path = Path(path)
        self._log = log or logger
        self._lock = threading.Lock()
        self.failures: int = 0

    def append(self, record: ProductRecord) -> WriteResult:
        line = json.dumps(record.model_dump(mode="json"), ensure_ascii=False) + "\n"

        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as f:
                    f.write(line)
            except OSError as e:
                self.failures += 1
                self._log.error(f"Product store write failed for {record.barcode}: {e}")
                return WriteResult.failure(e)

        self._log.debug(f"Product recorded: {record.barcode}")
        return WriteResult.success()

    def records(self) -> List[ProductRecord]:
        """Read every record, accepting JSON Lines and the legacy concatenated format."""
        with self._lock:
            if not self.path.exists():
                return []
            text = self.path.read_text(encoding="utf-8")

        decoder = json.JSONDecoder()
        records: List[ProductRecord] = []
        pos = 0
        while True:
            while pos < len(text) and text[pos].isspace():
                pos += 1
            if pos >= len(text):
                break
            obj, pos = decoder.raw_decode(text, pos)
            records.append(ProductRecord.model_validate(obj))
        return records
