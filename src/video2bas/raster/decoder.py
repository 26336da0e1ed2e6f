"""Decode video files into RGB frames with OpenCV.

Frames are resampled to the target frame rate and scaled to the target
width with the aspect ratio preserved, the same way ``ffmpeg -r FPS -vf
scale=W:-1`` would: source frames are dropped when downsampling and
repeated when the target rate is higher than the source rate.
"""

import logging
import math
from pathlib import Path
from typing import Iterator, List, Optional, TYPE_CHECKING

import cv2
import numpy as np

from video2bas.contracts import DecodeFailure
from video2bas.types import Frame

if TYPE_CHECKING:
    from video2bas.schemas import InternalConfig

__all__ = ['VideoFrameDecoder', 'scale_to_width']

logger = logging.getLogger(__name__)


def scale_to_width(image: np.ndarray, width: int) -> np.ndarray:
    """Resize ``image`` to ``width`` columns, height follows the aspect ratio."""
    height, src_width = image.shape[:2]
    if src_width == width:
        return image
    new_height = max(1, int(round(height * width / src_width)))
    interpolation = cv2.INTER_AREA if width < src_width else cv2.INTER_LINEAR
    return cv2.resize(image, (width, new_height), interpolation=interpolation)


class VideoFrameDecoder:
    """Read a video file and yield ``Frame`` objects.

    Parameters
    ----------
    config : InternalConfig, optional
        Supplies ``decoder.fps`` and ``decoder.max_width`` defaults. Explicit
        arguments to ``decode`` / ``iter_frames`` take precedence.

    Examples
    --------
    >>> decoder = VideoFrameDecoder(config)
    >>> frames = decoder.decode("clip.mp4")
    >>> frames[0].image.shape
    (72, 96, 3)
    """

    def __init__(self, config: Optional["InternalConfig"] = None):
        self.config = config
        self.fps = config.decoder.fps if config is not None else 10
        self.max_width = config.decoder.max_width if config is not None else 96

    def _open(self, path: Path):
        if not path.exists():
            raise DecodeFailure(f"video not found: {path}", stage="decode")
        capture = cv2.VideoCapture(str(path))
        if not capture.isOpened():
            capture.release()
            raise DecodeFailure(f"cannot open video: {path}", stage="decode")
        return capture

    def iter_frames(self, path, fps: Optional[int] = None,
                    max_width: Optional[int] = None) -> Iterator[Frame]:
        """Lazily decode frames; used by the low-memory serial mode.

        Raises
        ------
        DecodeFailure
            If the file is missing, cannot be opened, or yields no frames.
        """
        path = Path(path)
        fps = self.fps if fps is None else fps
        max_width = self.max_width if max_width is None else max_width
        if fps <= 0:
            fps = 1

        capture = self._open(path)
        try:
            source_fps = capture.get(cv2.CAP_PROP_FPS)
            if not source_fps or math.isnan(source_fps) or source_fps <= 0:
                logger.warning("Unknown source frame rate for %s, keeping every frame", path.name)
                step = 1.0
            else:
                step = source_fps / fps
            logger.debug("Decoding %s: source_fps=%.3f target_fps=%d step=%.3f",
                         path.name, source_fps or 0.0, fps, step)

            # output frame k shows source frame floor(k * step)
            index = 0
            source_index = 0
            while True:
                ok, bgr = capture.read()
                if not ok:
                    break
                if int(index * step + 1e-9) <= source_index:
                    rgb = cv2.cvtColor(scale_to_width(bgr, max_width), cv2.COLOR_BGR2RGB)
                    while int(index * step + 1e-9) <= source_index:
                        yield Frame(index=index, image=rgb)
                        index += 1
                source_index += 1
        finally:
            capture.release()

        if index == 0:
            raise DecodeFailure(f"no frames extracted from {path}", stage="decode")

    def decode(self, path, fps: Optional[int] = None,
               max_width: Optional[int] = None) -> List[Frame]:
        """Decode every sampled frame of ``path`` into memory."""
        frames = list(self.iter_frames(path, fps=fps, max_width=max_width))
        logger.info("Extracted %d frames from %s", len(frames), Path(path).name)
        return frames
