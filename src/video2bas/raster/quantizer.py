"""Median-cut palette quantization.

Reduces a frame's colors to at most ``color_count`` representative colors.
The working set is an arena of ``Box`` values local to one call; boxes are
addressed by index and replaced in place when split, so nothing is shared
between concurrent callers.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from video2bas.contracts import InvalidInput
from video2bas.types import Color

__all__ = ['Box', 'median_cut_quantize', 'unique_colors']

logger = logging.getLogger(__name__)


@dataclass
class Box:
    """A set of pixels plus their per-channel bounds.

    ``pixels`` is an (N, 3) integer array; ``mins``/``maxs`` hold the
    R, G, B bounds of those pixels.
    """
    pixels: np.ndarray
    mins: np.ndarray
    maxs: np.ndarray

    @classmethod
    def from_pixels(cls, pixels: np.ndarray) -> "Box":
        return cls(pixels=pixels, mins=pixels.min(axis=0), maxs=pixels.max(axis=0))

    @property
    def ranges(self) -> np.ndarray:
        return self.maxs - self.mins

    @property
    def max_range(self) -> int:
        return int(self.ranges.max())

    @property
    def split_channel(self) -> int:
        """Index of the channel with the widest range (first wins ties)."""
        return int(np.argmax(self.ranges))

    @property
    def splittable(self) -> bool:
        return len(self.pixels) > 1 and self.max_range > 0

    def split(self):
        """Sort by the widest channel and cut at the median index."""
        channel = self.split_channel
        order = np.argsort(self.pixels[:, channel], kind="stable")
        ordered = self.pixels[order]
        median = len(ordered) // 2
        return Box.from_pixels(ordered[:median]), Box.from_pixels(ordered[median:])

    def mean_color(self) -> Color:
        """Rounded (half up) mean color of the box, alpha opaque."""
        count = len(self.pixels)
        sums = self.pixels.sum(axis=0, dtype=np.int64)
        r, g, b = ((sums + count // 2) // count).tolist()
        return Color(int(r), int(g), int(b), 255)


def unique_colors(colors) -> List[Color]:
    """Drop repeated colors, keeping the first occurrence and the order."""
    seen = set()
    unique = []
    for color in colors:
        if color not in seen:
            seen.add(color)
            unique.append(color)
    return unique


def _pick_box(boxes: List[Box]) -> int:
    """Index of the splittable box with the greatest channel range, or -1."""
    best_idx = -1
    best_range = -1
    for idx, box in enumerate(boxes):
        if not box.splittable:
            continue
        box_range = box.max_range
        if box_range > best_range:
            best_range = box_range
            best_idx = idx
    return best_idx


def median_cut_quantize(image: np.ndarray, color_count: int) -> List[Color]:
    """Reduce an image to a palette of at most ``color_count`` colors.

    Parameters
    ----------
    image : np.ndarray
        RGB image of shape (H, W, 3) or a flat (N, 3) pixel array. Extra
        channels (alpha) are ignored.
    color_count : int
        Requested palette size, >= 1.

    Returns
    -------
    list of Color
        One color per final box, in arena order, each color listed once.
        Fewer than ``color_count`` when the image has fewer distinct colors
        or two boxes share a rounded mean.

    Raises
    ------
    InvalidInput
        If the image holds no pixels or ``color_count`` < 1.
    """
    if color_count < 1:
        raise InvalidInput(f"color_count must be >= 1, got {color_count}", stage="quantize")
    if image is None:
        raise InvalidInput("image is None", stage="quantize")

    pixels = np.asarray(image)
    if pixels.ndim not in (2, 3) or pixels.shape[-1] < 3:
        raise InvalidInput(f"expected RGB pixels, got shape {pixels.shape}", stage="quantize")
    pixels = pixels[..., :3].reshape(-1, 3).astype(np.int32)
    if len(pixels) == 0:
        raise InvalidInput("image has no pixels", stage="quantize")

    boxes = [Box.from_pixels(pixels)]

    while len(boxes) < color_count:
        idx = _pick_box(boxes)
        if idx < 0:
            logger.debug("No splittable box left at %d/%d colors", len(boxes), color_count)
            break
        low, high = boxes[idx].split()
        boxes[idx:idx + 1] = [low, high]

    palette = unique_colors(box.mean_color() for box in boxes)
    if len(palette) < len(boxes):
        logger.debug("Merged %d boxes with equal mean colors", len(boxes) - len(palette))
    return palette
