"""Per-pixel palette classification into color layers.

Every pixel goes to the palette entry nearest in RGB (squared Euclidean
distance, first entry wins ties). Each palette entry gets one mask, black
(``MASK_FOREGROUND``) where the pixel belongs to it and white elsewhere.
"""

import logging
from typing import Sequence

import numpy as np

from video2bas.contracts import InvalidInput
from video2bas.raster.quantizer import median_cut_quantize
from video2bas.types import MASK_BACKGROUND, MASK_FOREGROUND, Color, ColorLayer, Frame, FrameLayers

__all__ = ['nearest_palette_index', 'split_colors', 'split_colors_auto']

logger = logging.getLogger(__name__)


def nearest_palette_index(image: np.ndarray, palette: Sequence[Color]) -> np.ndarray:
    """Return an (H, W) array of palette indices, one per pixel."""
    rgb = np.asarray(image)[..., :3].astype(np.int32)

    best = np.zeros(rgb.shape[:2], dtype=np.intp)
    best_dist = None
    for idx, color in enumerate(palette):
        diff = rgb - np.array(color.rgb(), dtype=np.int32)
        dist = np.einsum("hwc,hwc->hw", diff, diff)
        if best_dist is None:
            best_dist = dist
            continue
        # strict comparison keeps the first entry on ties
        closer = dist < best_dist
        best[closer] = idx
        best_dist = np.where(closer, dist, best_dist)
    return best


def split_colors(frame: Frame, palette: Sequence[Color]) -> FrameLayers:
    """Split a frame into one binary mask per palette color.

    Parameters
    ----------
    frame : Frame
        Frame with an RGB image of shape (H, W, 3).
    palette : sequence of Color
        Palette to classify against, in layer order.

    Returns
    -------
    FrameLayers
        ``len(palette)`` layers, masks shaped like the frame.

    Raises
    ------
    InvalidInput
        If the frame has no image or the palette is empty.
    """
    if frame.image is None or np.asarray(frame.image).size == 0:
        raise InvalidInput("frame has no image", stage="classify", frame_index=frame.index)
    if len(palette) == 0:
        raise InvalidInput("empty palette", stage="classify", frame_index=frame.index)

    image = np.asarray(frame.image)
    if image.ndim != 3 or image.shape[2] < 3:
        raise InvalidInput(f"expected (H, W, 3) image, got shape {image.shape}",
                           stage="classify", frame_index=frame.index)

    assignment = nearest_palette_index(image, palette)

    layers = []
    for idx, color in enumerate(palette):
        mask = np.full(assignment.shape, MASK_BACKGROUND, dtype=np.uint8)
        mask[assignment == idx] = MASK_FOREGROUND
        layers.append(ColorLayer(color=color, mask=mask))

    return FrameLayers(index=frame.index, layers=layers)


def split_colors_auto(frame: Frame, color_count: int) -> FrameLayers:
    """Quantize the frame to its own palette, then split it."""
    if frame.image is None:
        raise InvalidInput("frame has no image", stage="classify", frame_index=frame.index)
    try:
        palette = median_cut_quantize(frame.image, color_count)
    except InvalidInput as e:
        e.with_context(frame_index=frame.index)
        raise
    logger.debug("Frame %d palette: %s", frame.index, [c.hex for c in palette])
    return split_colors(frame, palette)
