"""Raster stage modules.

- decoder: Read and resample video frames
- quantizer: Median-cut palette reduction
- classifier: Per-pixel palette layers
"""

from video2bas.raster.decoder import VideoFrameDecoder
from video2bas.raster.quantizer import median_cut_quantize
from video2bas.raster.classifier import split_colors, split_colors_auto

__all__ = [
    "VideoFrameDecoder",
    "median_cut_quantize",
    "split_colors",
    "split_colors_auto",
]
