"""Read traced SVG documents back into path strings and canvas sizes."""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Tuple

from video2bas.contracts import ParseFailure
from video2bas.types import FrameData, FrameSVG

__all__ = ['parse_viewbox', 'extract_paths', 'parse_frame']

logger = logging.getLogger(__name__)

_VIEWBOX_SPLIT = re.compile(r"[\s,]+")


def _local_name(tag: str) -> str:
    """Strip an ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _parse_xml(svg: str) -> ET.Element:
    try:
        return ET.fromstring(svg)
    except ET.ParseError as e:
        raise ParseFailure(f"malformed SVG: {e}", stage="parse") from e


def parse_viewbox(svg: str) -> Tuple[float, float, float, float]:
    """Return ``(min_x, min_y, width, height)`` of the root ``viewBox``.

    Raises
    ------
    ParseFailure
        If the document is not XML or the attribute is missing or does not
        hold four numbers.
    """
    root = _parse_xml(svg)
    raw = root.get("viewBox")
    if raw is None:
        raise ParseFailure("SVG has no viewBox attribute", stage="parse")
    parts = [p for p in _VIEWBOX_SPLIT.split(raw.strip()) if p]
    if len(parts) != 4:
        raise ParseFailure(f"invalid viewBox {raw!r}", stage="parse")
    try:
        min_x, min_y, width, height = (float(p) for p in parts)
    except ValueError as e:
        raise ParseFailure(f"invalid viewBox {raw!r}", stage="parse") from e
    return min_x, min_y, width, height


def extract_paths(svg: str) -> List[str]:
    """``d`` attribute of every ``<path>`` in document order, at any depth."""
    root = _parse_xml(svg)
    paths = []
    for element in root.iter():
        if _local_name(element.tag) != "path":
            continue
        d = element.get("d")
        if d:
            paths.append(d.strip())
    return paths


def parse_frame(frame_svg: FrameSVG) -> FrameData:
    """Flatten a traced frame into ``FrameData``.

    Each layer contributes ``{"color": "RRGGBB", "pathdata": ...}`` where
    ``pathdata`` is all of the layer's paths joined by single spaces.
    """
    data = []
    for layer in frame_svg.layers:
        try:
            paths = extract_paths(layer.svg)
        except ParseFailure as e:
            e.with_context(frame_index=frame_svg.index)
            raise
        if not paths:
            logger.debug("Frame %d layer %s has no paths", frame_svg.index, layer.color.hex)
        data.append({"color": layer.color.hex, "pathdata": " ".join(paths)})
    return FrameData(frame_index=frame_svg.index, data=data)

