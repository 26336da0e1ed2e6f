"""Frame stage contracts.

Enforce palette size, layer count, mask geometry and the per-pixel
partition guaranteed by the classifier, and the one-document-per-layer
guarantee of the tracer.
"""

from typing import Sequence

import numpy as np

from video2bas.contracts.base import require
from video2bas.types import MASK_FOREGROUND, Color, Frame, FrameLayers, FrameSVG


def assert_palette(palette: Sequence[Color], color_count: int) -> None:
    """Enforce quantizer contract: 1..color_count opaque colors."""
    require(
        len(palette) >= 1,
        "Palette contract violated: palette is empty"
    )
    require(
        len(palette) <= color_count,
        f"Palette contract violated: got {len(palette)} colors, requested at most {color_count}"
    )
    for color in palette:
        require(
            all(0 <= c <= 255 for c in (color.r, color.g, color.b)),
            f"Palette contract violated: channel out of range in {color}"
        )


def assert_layers(frame: Frame, frame_layers: FrameLayers,
                  palette: Sequence[Color]) -> None:
    """Enforce classifier contract.

    Parameters
    ----------
    frame : Frame
        Source frame.
    frame_layers : FrameLayers
        Output of ``split_colors``.
    palette : sequence of Color
        Palette the frame was classified against.

    Raises
    ------
    ContractViolation
        If layer count, mask shape or the per-pixel partition is broken.
    """
    require(
        frame_layers.index == frame.index,
        f"Layer contract violated: frame index {frame_layers.index} != {frame.index}"
    )
    require(
        len(frame_layers.layers) == len(palette),
        f"Layer contract violated: {len(frame_layers.layers)} layers for {len(palette)} palette colors"
    )

    height, width = frame.shape
    coverage = np.zeros((height, width), dtype=np.int32)
    for layer in frame_layers.layers:
        require(
            layer.mask.shape == (height, width),
            f"Layer contract violated: mask shape {layer.mask.shape}, expected {(height, width)}"
        )
        coverage += (layer.mask == MASK_FOREGROUND)

    require(
        bool(np.all(coverage == 1)),
        "Layer contract violated: every pixel must belong to exactly one layer"
    )


def assert_frame_svg(frame_layers: FrameLayers, frame_svg: FrameSVG) -> None:
    """Enforce tracer contract: one document per layer, colors preserved."""
    require(
        len(frame_svg.layers) == len(frame_layers.layers),
        f"Trace contract violated: {len(frame_svg.layers)} documents for {len(frame_layers.layers)} layers"
    )
    for layer, traced in zip(frame_layers.layers, frame_svg.layers):
        require(
            layer.color == traced.color,
            f"Trace contract violated: color {traced.color.hex} != {layer.color.hex}"
        )
