"""Pipeline contracts and failure types.

Contracts fail immediately and loudly when a stage does not produce its
promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Video2BasError subclasses report bad input and collaborator failures
"""

from video2bas.contracts.failure import (
    ContractViolation,
    FailurePolicy,
    Video2BasError,
    InvalidInput,
    DecodeFailure,
    TraceFailure,
    ParseFailure,
    IOFailure,
)
from video2bas.contracts.base import require
from video2bas.contracts.frames import assert_palette, assert_layers, assert_frame_svg

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "Video2BasError",
    "InvalidInput",
    "DecodeFailure",
    "TraceFailure",
    "ParseFailure",
    "IOFailure",
    "require",
    "assert_palette",
    "assert_layers",
    "assert_frame_svg",
]
