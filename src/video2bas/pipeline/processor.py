"""Per-frame processing stages.

Runs one frame through classify -> trace -> parse, checking stage contracts
between steps. Failures leave here tagged with the stage name and frame
index so the orchestrator can report (or, under ``collect``, skip) the
frame without further bookkeeping.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional, TYPE_CHECKING

from video2bas.contracts import (
    ContractViolation,
    Video2BasError,
    assert_frame_svg,
    assert_layers,
    assert_palette,
)
from video2bas.raster.classifier import split_colors
from video2bas.raster.quantizer import median_cut_quantize, unique_colors
from video2bas.types import Color, Frame, FrameData, FrameLayers, FrameSVG
from video2bas.vector.svg_parser import parse_frame
from video2bas.vector.tracer import MaskTracer

if TYPE_CHECKING:
    from video2bas.schemas import InternalConfig

__all__ = ['FrameProcessor']

logger = logging.getLogger(__name__)


@contextmanager
def _stage(name: str, frame_index: int):
    """Tag any failure raised inside the block with stage and frame."""
    try:
        yield
    except ContractViolation:
        raise
    except Video2BasError as e:
        e.with_context(stage=name, frame_index=frame_index)
        raise
    except Exception as e:
        raise Video2BasError(f"{type(e).__name__}: {e}", stage=name,
                             frame_index=frame_index) from e


class FrameProcessor:
    """Classifies, traces and parses frames according to ``InternalConfig``.

    The processor holds no per-frame state, so one instance is shared by
    every worker thread.

    Parameters
    ----------
    config : InternalConfig
        Fully validated runtime configuration.
    tracer : MaskTracer, optional
        Tracer override, mainly for tests.

    Example usage::

        processor = FrameProcessor(config)
        frame_data = processor.process(frame)
    """

    def __init__(self, config: "InternalConfig", tracer: Optional[MaskTracer] = None):
        self.config = config
        self.color_count = config.quantizer.color_count
        self.global_palette: Optional[List[Color]] = None
        if config.quantizer.palette:
            self.global_palette = unique_colors(Color.from_hex(h) for h in config.quantizer.palette)
        self.tracer = tracer if tracer is not None else MaskTracer(config)

        if self.global_palette is not None:
            logger.info("Using global palette: %s", [c.hex for c in self.global_palette])

    def classify(self, frame: Frame) -> FrameLayers:
        """Quantize (unless a global palette is set) and split into layers."""
        with _stage("quantize", frame.index):
            if self.global_palette is not None:
                palette = self.global_palette
            else:
                palette = median_cut_quantize(frame.image, self.color_count)
                assert_palette(palette, self.color_count)
            logger.debug("Frame %d palette: %s", frame.index, [c.hex for c in palette])

        with _stage("classify", frame.index):
            frame_layers = split_colors(frame, palette)
            assert_layers(frame, frame_layers, palette)
        return frame_layers

    def trace(self, frame_layers: FrameLayers) -> FrameSVG:
        with _stage("trace", frame_layers.index):
            frame_svg = self.tracer.trace_frame(frame_layers)
            assert_frame_svg(frame_layers, frame_svg)
        return frame_svg

    def parse(self, frame_svg: FrameSVG) -> FrameData:
        with _stage("parse", frame_svg.index):
            return parse_frame(frame_svg)

    def process(self, frame: Frame) -> FrameData:
        """Run every per-frame stage on one frame."""
        return self.parse(self.trace(self.classify(frame)))

    def process_traced(self, frame: Frame):
        """Like ``process`` but also return the traced SVG.

        The first traced layer of the first frame decides the canvas size,
        so the orchestrator needs it alongside the parsed data.
        """
        frame_svg = self.trace(self.classify(frame))
        return frame_svg, self.parse(frame_svg)
