"""Vector stage modules.

- tracer: Mask to SVG outline documents
- svg_parser: SVG documents to per-frame path data
- path_transform: Y-axis flip of path data
- script_generator: Per-frame BAS script text
"""

from video2bas.vector.tracer import MaskTracer
from video2bas.vector.svg_parser import parse_viewbox, extract_paths, parse_frame
from video2bas.vector.path_transform import flip_path, DEFAULT_VIEWBOX_HEIGHT
from video2bas.vector.script_generator import generate_frame_text, generate_all_text

__all__ = [
    "MaskTracer",
    "parse_viewbox",
    "extract_paths",
    "parse_frame",
    "flip_path",
    "DEFAULT_VIEWBOX_HEIGHT",
    "generate_frame_text",
    "generate_all_text",
]
