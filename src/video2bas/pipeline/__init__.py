"""Pipeline modules.

- orchestrator: Conversion pipeline controller
- processor: Per-frame classify/trace/parse stages
- batch_runner: Bounded-parallel, order-preserving execution
- segment_writer: Size-bounded output segments
"""

from video2bas.pipeline.batch_runner import (
    BatchFailure,
    BatchResult,
    ProgressCounter,
    ProgressTicker,
    run_batch,
)
from video2bas.pipeline.segment_writer import SegmentWriter, write_segments
from video2bas.pipeline.processor import FrameProcessor
from video2bas.pipeline.orchestrator import ConversionOrchestrator, RunSummary

__all__ = [
    "BatchFailure",
    "BatchResult",
    "ProgressCounter",
    "ProgressTicker",
    "run_batch",
    "SegmentWriter",
    "write_segments",
    "FrameProcessor",
    "ConversionOrchestrator",
    "RunSummary",
]
