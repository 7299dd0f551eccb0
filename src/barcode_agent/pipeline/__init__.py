"""
Pipeline Module
===============

Scan-to-result orchestration.

Components:
    - ScanPipeline: Owns gate, debouncer, detector, catalog client and sink
    - PipelineMetrics: Operational counters
    - ResultSink / DisplayState: Result display contract and in-process sink
"""

from barcode_agent.pipeline.sink import READY_TEXT, DisplayState, ResultSink
from barcode_agent.pipeline.scan_pipeline import PipelineMetrics, ScanPipeline

__all__ = [
    "ScanPipeline",
    "PipelineMetrics",
    "ResultSink",
    "DisplayState",
    "READY_TEXT",
]
