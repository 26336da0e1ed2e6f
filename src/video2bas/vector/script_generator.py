"""Render per-frame layer data as BAS animation script text.

Every visible layer of frame ``i`` becomes one path element ``p{i}_{COLOR}``
that is created hidden, shown at ``i / framerate`` seconds (minus the start
offset), and hidden again one frame duration later.
"""

import logging
import math
from typing import Iterable, List, Sequence

from video2bas.contracts import FailurePolicy, InvalidInput
from video2bas.types import FrameData
from video2bas.vector.path_transform import flip_path

__all__ = ['BAS_TEMPLATE', 'generate_frame_text', 'generate_all_text']

logger = logging.getLogger(__name__)

BAS_TEMPLATE = """
let p{name} = path{{d = "{path}" viewBox="0 0 {width} {height}" width = 100% fillColor = 0x{color} alpha = 0
borderWidth = 15
    borderColor = 0x{color}
}}
set p{name} {{}} {start}ms
then set p{name} {{alpha = 1}} 0ms
then set p{name} {{}} {display}ms
then set p{name} {{alpha = 0}} 0ms
"""


def generate_frame_text(frame_data: FrameData, viewbox_width: int, viewbox_height: int,
                        framerate: float, start_time: float = 0,
                        skip_colors: Iterable[str] = ("000000",),
                        strict: bool = False) -> str:
    """Render one frame's layers as script text.

    Parameters
    ----------
    frame_data : FrameData
        ``data`` holds ``{"color": "RRGGBB", "pathdata": str}`` per layer.
    viewbox_width, viewbox_height : int
        Canvas size written into each element; the height is also the flip
        extent for the path data.
    framerate : float
        Frames per second, > 0.
    start_time : float, optional
        Milliseconds subtracted from every start offset.
    skip_colors : iterable of str, optional
        Layer colors left out of the script (pure black by default).
    strict : bool, optional
        Reject malformed path numbers instead of reading them as 0.

    Returns
    -------
    str
        Concatenated element blocks, each preceded by a newline. Empty when
        every layer is skipped.
    """
    if framerate <= 0:
        raise InvalidInput(f"framerate must be > 0, got {framerate}",
                           stage="generate", frame_index=frame_data.frame_index)

    skipped = {c.upper() for c in skip_colors}
    frame_index = frame_data.frame_index
    display_time = 1000.0 / framerate
    start_offset = frame_index / framerate * 1000.0 - start_time

    blocks = []
    for layer in frame_data.data:
        color = layer["color"]
        if color.upper() in skipped:
            continue
        blocks.append(BAS_TEMPLATE.format(
            name=f"{frame_index}_{color}",
            path=flip_path(layer["pathdata"], viewbox_height, strict=strict),
            width=viewbox_width,
            height=viewbox_height,
            color=color,
            start=int(math.floor(start_offset)),
            display=int(math.floor(display_time)),
        ))
    return "".join(blocks)


def generate_all_text(frames: Sequence[FrameData], viewbox_width: int, viewbox_height: int,
                      framerate: float, start_time: float = 0,
                      skip_colors: Iterable[str] = ("000000",),
                      parallel: int = 4, strict: bool = False,
                      progress=None, policy=FailurePolicy.FAIL_FAST) -> List[str]:
    """Render every frame, one text per frame in input order."""
    from video2bas.pipeline.batch_runner import run_batch

    skip_colors = tuple(skip_colors)

    def render(frame_data):
        return generate_frame_text(frame_data, viewbox_width, viewbox_height, framerate,
                                   start_time=start_time, skip_colors=skip_colors,
                                   strict=strict)

    logger.info("Generating script text for %d frames", len(frames))
    return run_batch(frames, render, parallel, progress=progress, policy=policy)
