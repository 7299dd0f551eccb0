"""
Scan Pipeline
=============

Frame → barcode → lookup → result orchestration.

Flow per frame:
    FrameGate.admit → detector (analysis executor) → FrameGate.release
        → select → ScanDebouncer.try_lock → sink.show(barcode)
        → CatalogClient.lookup (separate asyncio task)
        → sink.show("barcode\\nresolution")

Concurrency:
    - Frames are processed one at a time by `run()` (single analysis lane)
    - Decoding runs on a one-thread executor and never suspends intake
      beyond the current frame
    - Lookups run as their own tasks; the debouncer guarantees at most
      one is dispatched per scanning session
    - A completion from an earlier session, or after close(), is discarded
      (its ledger entry has still been written)
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Set

from barcode_agent.catalog.client import CatalogClient
from barcode_agent.models.outcome import LookupOutcome, format_result
from barcode_agent.pipeline.sink import DisplayState, ResultSink
from barcode_agent.scanning.candidates import Candidate, select, to_candidates
from barcode_agent.scanning.debouncer import ScanDebouncer
from barcode_agent.scanning.detector import BarcodeDetector
from barcode_agent.stream.frame import Frame
from barcode_agent.stream.gate import FrameGate
from barcode_agent.stream.slot import LatestFrameSlot


logger = logging.getLogger(__name__)


class PipelineMetrics:
    """Counters for pipeline observability."""

    __slots__ = (
        "frames_processed",
        "decode_failures",
        "empty_frames",
        "scans_accepted",
        "duplicate_scans",
        "lookups_completed",
        "discarded_completions",
        "lookup_errors",
        "outcomes",
    )

    def __init__(self) -> None:
        self.frames_processed: int = 0
        self.decode_failures: int = 0
        self.empty_frames: int = 0
        self.scans_accepted: int = 0
        self.duplicate_scans: int = 0
        self.lookups_completed: int = 0
        self.discarded_completions: int = 0
        self.lookup_errors: int = 0
        self.outcomes: Dict[str, int] = {}

    def to_dict(self) -> dict:
        return {
            "frames_processed": self.frames_processed,
            "decode_failures": self.decode_failures,
            "empty_frames": self.empty_frames,
            "scans_accepted": self.scans_accepted,
            "duplicate_scans": self.duplicate_scans,
            "lookups_completed": self.lookups_completed,
            "discarded_completions": self.discarded_completions,
            "lookup_errors": self.lookup_errors,
            "outcomes": dict(self.outcomes),
        }


class ScanPipeline:
    """
    Owns the scan state and wires the pipeline stages together.

    Attributes:
        debouncer: Scan latch for this pipeline
        gate: Frame admission gate
        sink: Result sink
        catalog: Catalog client
        metrics: Operational counters

    Example:
        pipeline = ScanPipeline(detector=MockDetector(["5000112637922"]), catalog=client)
        dispatched = await pipeline.process_frame(frame)
        await pipeline.drain()
        print(pipeline.sink.display_text)
    """

    def __init__(
        self,
        detector: BarcodeDetector,
        catalog: CatalogClient,
        sink: Optional[ResultSink] = None,
        debouncer: Optional[ScanDebouncer] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        """
        Initialize scan pipeline.

        Args:
            detector: Decode primitive
            catalog: Catalog client (records every lookup)
            sink: Result sink; defaults to an in-process DisplayState
            debouncer: Scan latch; a fresh one is created if omitted
            executor: Analysis executor; a single-thread pool is created if omitted
        """
        self.debouncer = debouncer or ScanDebouncer()
        self.gate = FrameGate(self.debouncer)
        self.sink: ResultSink = sink if sink is not None else DisplayState()
        self.catalog = catalog
        self.metrics = PipelineMetrics()

        self._detector = detector
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="frame-analysis"
        )
        self._lookups: Set[asyncio.Task] = set()
        self._running: bool = False
        self._closed: bool = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Number of lookups not yet completed."""
        return len(self._lookups)

    # =========================================================================
    # FRAME PROCESSING
    # =========================================================================

    async def process_frame(self, frame: Frame) -> bool:
        """
        Run one frame through admission, decoding and selection.

        The frame is closed before this returns, on every path.

        Args:
            frame: Frame taken from the source; ownership passes here

        Returns:
            True if this frame dispatched a catalog lookup.
        """
        if self._closed:
            frame.close()
            return False

        if not self.gate.admit(frame):
            return False

        self.metrics.frames_processed += 1
        try:
            candidates = await self._detect(frame)
        finally:
            self.gate.release(frame)

        barcode = select(candidates)
        if not barcode:
            self.metrics.empty_frames += 1
            return False

        if not self.debouncer.try_lock(barcode):
            self.metrics.duplicate_scans += 1
            return False

        self.metrics.scans_accepted += 1
        self.sink.show(barcode)
        self._dispatch_lookup(barcode, self.debouncer.session)
        return True

    async def _detect(self, frame: Frame) -> List[Candidate]:
        """Decode on the analysis executor; any failure means no candidates."""
        loop = asyncio.get_running_loop()
        try:
            values = await loop.run_in_executor(self._executor, self._detector.detect, frame)
        except Exception as e:
            self.metrics.decode_failures += 1
            logger.debug(f"Decode failed for frame {frame.frame_id}: {e}")
            return []
        return to_candidates(values)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def _dispatch_lookup(self, barcode: str, session: int) -> None:
        task = asyncio.create_task(
            self._complete_lookup(barcode, session),
            name=f"lookup-{barcode}",
        )
        self._lookups.add(task)
        task.add_done_callback(self._on_lookup_done)

    async def _complete_lookup(self, barcode: str, session: int) -> LookupOutcome:
        outcome = await self.catalog.lookup(barcode)
        self.metrics.lookups_completed += 1
        kind = outcome.kind.value
        self.metrics.outcomes[kind] = self.metrics.outcomes.get(kind, 0) + 1

        if self._closed or session != self.debouncer.session:
            self.metrics.discarded_completions += 1
            logger.info(f"Discarding result for {barcode}: scanning session ended")
            return outcome

        self.sink.show(format_result(barcode, outcome))
        return outcome

    def _on_lookup_done(self, task: asyncio.Task) -> None:
        self._lookups.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.metrics.lookup_errors += 1
            logger.error(f"Lookup task {task.get_name()} failed: {error!r}")

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight lookups to complete."""
        if not self._lookups:
            return
        pending = list(self._lookups)
        done, not_done = await asyncio.wait(pending, timeout=timeout)
        if not_done:
            logger.warning(f"{len(not_done)} lookup(s) still in flight after drain")

    # =========================================================================
    # CONTROL
    # =========================================================================

    def reset(self) -> bool:
        """
        Re-arm scanning and clear the displayed result.

        Returns:
            True if the pipeline was LOCKED; False (no-op) if already READY.
        """
        if not self.debouncer.reset():
            return False
        self.sink.clear()
        return True

    async def run(self, slot: LatestFrameSlot) -> None:
        """
        Analysis lane: take the latest frame, process it, repeat.

        Runs until stop() or close() is called.
        """
        self._running = True
        logger.info("Scan pipeline started")

        while self._running and not self._closed:
            try:
                frame = await slot.get(timeout=1.0)
                if frame is None:
                    continue
                await self.process_frame(frame)
            except asyncio.CancelledError:
                logger.info("Scan pipeline cancelled")
                break
            except Exception as e:
                logger.error(f"Pipeline error: {e}")
                await asyncio.sleep(0.1)

        slot.clear()
        self._running = False
        logger.info("Scan pipeline stopped")

    def stop(self) -> None:
        self._running = False

    def close(self) -> None:
        """
        Tear down the analysis executor.

        In-flight lookups are not cancelled; their results are discarded.
        """
        if self._closed:
            return
        self._closed = True
        self._running = False
        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.info(f"Scan pipeline closed ({self.in_flight} lookup(s) in flight)")

    def metrics_dict(self) -> dict:
        return {
            **self.metrics.to_dict(),
            "scan_state": self.debouncer.state.value,
            "session": self.debouncer.session,
            "in_flight": self.in_flight,
            "gate": self.gate.metrics(),
        }
