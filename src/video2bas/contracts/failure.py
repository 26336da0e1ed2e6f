"""Centralized failure types for the conversion pipeline.

Contract violations signal pipeline bugs. The ``Video2BasError`` family
signals bad input or failing collaborators (decoder, tracer, parser, disk).
Both propagate; nothing in the core retries.
"""

from enum import Enum
from typing import Optional


class FailurePolicy(str, Enum):
    """How a batch of frame work items reacts to a failing item.

    FAIL_FAST (default): Let scheduled work finish, then raise the first
    observed error and discard every result.

    COLLECT: Keep the results that succeeded and report failures per index.
    """
    FAIL_FAST = "fail_fast"
    COLLECT = "collect"


class ContractViolation(RuntimeError):
    """Raised when a pipeline stage does not deliver its promised invariants.

    Key distinction:
    - InvalidInput: caller handed us something unusable
    - ContractViolation: pipeline bug (programmer error)
    - Decode/Trace/Parse/IOFailure: a collaborator failed at runtime
    """
    pass


class Video2BasError(RuntimeError):
    """Base class for runtime failures, tagged with stage and frame index."""

    def __init__(self, message: str, stage: Optional[str] = None,
                 frame_index: Optional[int] = None):
        self.message = message
        self.stage = stage
        self.frame_index = frame_index
        super().__init__(self._render())

    def _render(self) -> str:
        context = []
        if self.stage is not None:
            context.append(f"stage={self.stage}")
        if self.frame_index is not None:
            context.append(f"frame={self.frame_index}")
        if context:
            return f"[{', '.join(context)}] {self.message}"
        return self.message

    def with_context(self, stage: Optional[str] = None,
                     frame_index: Optional[int] = None) -> "Video2BasError":
        """Fill in missing context without overwriting what is already known."""
        if self.stage is None:
            self.stage = stage
        if self.frame_index is None:
            self.frame_index = frame_index
        self.args = (self._render(),)
        return self


class InvalidInput(Video2BasError, ValueError):
    """Empty image, empty palette or invalid arguments."""


class DecodeFailure(Video2BasError):
    """Video could not be opened or produced no frames."""


class TraceFailure(Video2BasError):
    """A mask could not be traced into an SVG document."""


class ParseFailure(Video2BasError):
    """An SVG document could not be parsed."""


class IOFailure(Video2BasError):
    """An output segment could not be created or written."""
