"""Data model shared by the pipeline stages.

Frames come out of the decoder, ``FrameLayers`` out of the classifier,
``FrameSVG`` out of the tracer and ``FrameData`` out of the SVG parser.
Images and masks are numpy arrays indexed ``[y, x]``.
"""

import json
from dataclasses import dataclass, field
from typing import List

import numpy as np

__all__ = [
    "MASK_FOREGROUND",
    "MASK_BACKGROUND",
    "Color",
    "Frame",
    "ColorLayer",
    "FrameLayers",
    "LayerSVG",
    "FrameSVG",
    "FrameData",
]

# Mask sentinels: black marks "this color", white marks everything else
MASK_FOREGROUND = 0
MASK_BACKGROUND = 255


@dataclass(frozen=True)
class Color:
    """Palette entry. Alpha is always opaque for quantized colors."""
    r: int
    g: int
    b: int
    a: int = 255

    @property
    def hex(self) -> str:
        """Upper-case ``RRGGBB`` identifier used in script names."""
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"

    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse ``RRGGBB`` or ``#RRGGBB``."""
        text = value.strip().lstrip("#")
        if len(text) != 6:
            raise ValueError(f"Expected 6 hex digits, got {value!r}")
        return cls(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


@dataclass(frozen=True)
class Frame:
    """One decoded video frame, RGB ``uint8`` of shape (H, W, 3)."""
    index: int
    image: np.ndarray

    @property
    def shape(self) -> tuple:
        return tuple(self.image.shape[:2])


@dataclass
class ColorLayer:
    color: Color
    mask: np.ndarray


@dataclass
class FrameLayers:
    index: int
    layers: List[ColorLayer] = field(default_factory=list)

    @property
    def palette(self) -> List[Color]:
        return [layer.color for layer in self.layers]


@dataclass
class LayerSVG:
    color: Color
    svg: str


@dataclass
class FrameSVG:
    index: int
    layers: List[LayerSVG] = field(default_factory=list)


@dataclass
class FrameData:
    """Normalized per-frame layer data consumed by the script generator.

    ``data`` holds one ``{"color": "RRGGBB", "pathdata": str}`` dict per layer.
    """
    frame_index: int
    data: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"frameIndex": self.frame_index, "data": list(self.data)}

    def to_json(self, indent=None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
