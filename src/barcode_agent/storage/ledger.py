"""
Response Ledger
===============

Append-only audit trail of every catalog interaction.

File Format:
    {
      "responses": [
        {"barcode": "5000112637922", "timestamp": 1707321234567, "api_response": {...}},
        ...
      ]
    }

Pretty-printed (indent 2), UTF-8, rewritten in full on every append.

Design Rules:
    - Read-modify-write of the whole document, serialized by a file-scoped lock
    - Rewrite goes through a temp file + atomic rename (no truncated ledger)
    - Timestamps never decrease, even if the wall clock steps back
    - Storage errors are logged and returned, NEVER raised
"""

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, List, Optional

from barcode_agent.models.records import LedgerEntry
from barcode_agent.storage.result import WriteResult


logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Wall clock in milliseconds since epoch."""
    return time.time_ns() // 1_000_000


class LedgerCorruptError(Exception):
    """Raised when an existing ledger document cannot be read."""
    pass


class ResponseLedger:
    """
    Whole-document JSON ledger.

    Attributes:
        path: Ledger file location
        failures: Number of appends that did not reach disk

    Example:
        ledger = ResponseLedger(Path("data/api_responses.json"))
        entry = ledger.new_entry("5000112637922", {"status": 1, ...})
        result = ledger.append(entry)
    """

    def __init__(
        self,
        path: Path,
        clock: Callable[[], int] = now_ms,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize ledger.

        Args:
            path: Ledger file location (parent created on first write)
            clock: Millisecond clock, injectable for tests
            log: Logger that receives persistence failures
        """
        self.path = Path(path)
        self._clock = clock
        self._log = log or logger
        self._lock = threading.Lock()
        self._last_timestamp: int = 0
        self.failures: int = 0

    def new_entry(self, barcode: str, api_response: Any) -> LedgerEntry:
        """Stamp a new entry with a non-decreasing timestamp."""
        with self._lock:
            timestamp = max(self._clock(), self._last_timestamp)
            self._last_timestamp = timestamp
        return LedgerEntry(barcode=barcode, timestamp=timestamp, api_response=api_response)

    def append(self, entry: LedgerEntry) -> WriteResult:
        """
        Append one entry and rewrite the document.

        Args:
            entry: Entry to record

        Returns:
            WriteResult describing whether the entry was persisted.
        """
        with self._lock:
            try:
                responses = self._load_responses()
                responses.append(entry.model_dump(mode="json"))
                self._write_document({"responses": responses})
            except (OSError, TypeError, ValueError) as e:
                self.failures += 1
                self._log.error(f"Ledger write failed for {entry.barcode}: {e}")
                return WriteResult.failure(e)

        self._log.debug(f"Ledger entry recorded for {entry.barcode} ({len(responses)} total)")
        return WriteResult.success()

    def entries(self) -> List[LedgerEntry]:
        """
        Read back every entry in append order.

        Raises:
            LedgerCorruptError: If the document exists but cannot be parsed
        """
        with self._lock:
            try:
                raw = self._read_document()
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise LedgerCorruptError(f"Unreadable ledger {self.path}: {e}") from e
        return [LedgerEntry.model_validate(item) for item in raw]

    # =========================================================================
    # FILE HANDLING (caller holds the lock)
    # =========================================================================

    def _read_document(self) -> list:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        document = json.loads(text)
        responses = document.get("responses") if isinstance(document, dict) else None
        if not isinstance(responses, list):
            raise json.JSONDecodeError("missing 'responses' array", text, 0)
        return responses

    def _load_responses(self) -> list:
        try:
            return self._read_document()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            quarantine = self.path.with_name(f"{self.path.name}.corrupt-{self._clock()}")
            os.replace(self.path, quarantine)
            self._log.error(
                f"Ledger {self.path} unreadable ({e}); moved to {quarantine}, starting fresh"
            )
            return []

    def _write_document(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
