"""Trace binary color masks into SVG outline documents.

Two methods share one output convention, the one the ``potrace`` binary
uses: ``viewBox="0 0 W H"`` in pixels, and path coordinates in tenths of a
pixel with y measured upward from the bottom edge, wrapped in a
``translate(0,H) scale(0.1,-0.1)`` group.

- ``contours`` (default): scikit-image marching squares on the mask,
  simplified with ``approximate_polygon``.
- ``potrace``: the external ``potrace`` program, fed a PBM on stdin.
"""

import logging
import subprocess
from typing import List, Optional, TYPE_CHECKING

import numpy as np

from video2bas.contracts import InvalidInput, TraceFailure
from video2bas.types import MASK_FOREGROUND, Color, FrameLayers, FrameSVG, LayerSVG

if TYPE_CHECKING:
    from video2bas.schemas import InternalConfig

__all__ = ['MaskTracer', 'mask_to_pbm', 'contours_to_path']

logger = logging.getLogger(__name__)

SVG_TEMPLATE = (
    '<?xml version="1.0" standalone="no"?>\n'
    '<svg version="1.0" xmlns="http://www.w3.org/2000/svg" '
    'width="{width}pt" height="{height}pt" viewBox="0 0 {width} {height}" '
    'preserveAspectRatio="xMidYMid meet">\n'
    '<g transform="translate(0,{height}) scale(0.1,-0.1)" fill="#{fill}" stroke="none">\n'
    '{paths}'
    '</g>\n'
    '</svg>\n'
)


def _polygon_area(points: np.ndarray) -> float:
    """Absolute shoelace area of a closed (N, 2) polygon."""
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def contours_to_path(contours: List[np.ndarray], height: int) -> str:
    """Encode marching-squares contours as one path in tenth-pixel units.

    ``contours`` are (N, 2) ``(row, col)`` arrays in image coordinates.
    """
    parts = []
    for contour in contours:
        points = contour[:-1] if len(contour) > 1 and np.array_equal(contour[0], contour[-1]) else contour
        if len(points) < 3:
            continue
        xs = np.rint(points[:, 1] * 10).astype(np.int64)
        ys = np.rint((height - points[:, 0]) * 10).astype(np.int64)
        pairs = [f"{x} {y}" for x, y in zip(xs.tolist(), ys.tolist())]
        parts.append(f"M{pairs[0]} L{' '.join(pairs[1:])} Z")
    return " ".join(parts)


def mask_to_pbm(mask: np.ndarray) -> bytes:
    """Binary PBM (P4) image where foreground pixels are black (1 bits)."""
    foreground = np.asarray(mask) == MASK_FOREGROUND
    height, width = foreground.shape
    packed = np.packbits(foreground.astype(np.uint8), axis=1)
    return f"P4\n{width} {height}\n".encode("ascii") + packed.tobytes()


class MaskTracer:
    """Config-driven mask tracer.

    Parameters
    ----------
    config : InternalConfig, optional
        Supplies the ``tracer`` section. Defaults match ``ParamConfig``.

    Examples
    --------
    >>> tracer = MaskTracer(config)
    >>> svg = tracer.trace(layer.mask)
    >>> frame_svg = tracer.trace_frame(frame_layers)
    """

    def __init__(self, config: Optional["InternalConfig"] = None):
        self.config = config
        if config is not None:
            tracer_cfg = config.tracer
            self.method = tracer_cfg.method
            self.potrace_path = tracer_cfg.potrace_path
            self.turdsize = tracer_cfg.turdsize
            self.alphamax = tracer_cfg.alphamax
            self.opttolerance = tracer_cfg.opttolerance
            self.timeout_sec = tracer_cfg.timeout_sec
        else:
            self.method = "contours"
            self.potrace_path = "potrace"
            self.turdsize = 2
            self.alphamax = 1.0
            self.opttolerance = 0.2
            self.timeout_sec = 30.0

        logger.debug("MaskTracer initialized: method=%s", self.method)

    def trace(self, mask: np.ndarray, fill: str = "000000") -> str:
        """Trace one mask into an SVG document string."""
        mask = np.asarray(mask)
        if mask.ndim != 2 or mask.size == 0:
            raise InvalidInput(f"expected non-empty 2D mask, got shape {mask.shape}", stage="trace")

        if self.method == "contours":
            return self._trace_contours(mask, fill)
        elif self.method == "potrace":
            return self._trace_potrace(mask)
        else:
            raise ValueError(f"Unknown trace method: {self.method}")

    def _trace_contours(self, mask: np.ndarray, fill: str) -> str:
        """Marching squares on the padded foreground, then polygon simplification."""
        from skimage.measure import approximate_polygon, find_contours

        height, width = mask.shape
        foreground = (mask == MASK_FOREGROUND).astype(np.float64)
        # one background pixel of padding closes contours touching the border
        padded = np.pad(foreground, 1, mode="constant", constant_values=0.0)

        contours = []
        for contour in find_contours(padded, 0.5):
            # padded index -> pixel-edge coordinates of the original mask
            contour = contour - 0.5
            if self.opttolerance > 0:
                contour = approximate_polygon(contour, tolerance=self.opttolerance)
            if len(contour) < 3 or _polygon_area(contour) < self.turdsize:
                continue
            contours.append(contour)

        d = contours_to_path(contours, height)
        paths = f'<path d="{d}"/>\n' if d else ""
        return SVG_TEMPLATE.format(width=width, height=height, fill=fill, paths=paths)

    def _trace_potrace(self, mask: np.ndarray) -> str:
        cmd = [
            self.potrace_path, "-s",
            "-t", str(self.turdsize),
            "-a", str(self.alphamax),
            "-O", str(self.opttolerance),
            "-o", "-", "-",
        ]
        try:
            result = subprocess.run(cmd, input=mask_to_pbm(mask), capture_output=True,
                                    timeout=self.timeout_sec, check=False)
        except FileNotFoundError as e:
            raise TraceFailure(f"potrace not found: {self.potrace_path}", stage="trace") from e
        except subprocess.TimeoutExpired as e:
            raise TraceFailure(f"potrace timed out after {self.timeout_sec}s", stage="trace") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise TraceFailure(f"potrace exited with {result.returncode}: {stderr}", stage="trace")
        return result.stdout.decode("utf-8")

    def trace_layer(self, color: Color, mask: np.ndarray) -> LayerSVG:
        return LayerSVG(color=color, svg=self.trace(mask, fill=color.hex))

    def trace_frame(self, frame_layers: FrameLayers) -> FrameSVG:
        """Trace every layer of a frame, layer order preserved."""
        layers = []
        for layer in frame_layers.layers:
            try:
                layers.append(self.trace_layer(layer.color, layer.mask))
            except (InvalidInput, TraceFailure) as e:
                e.with_context(frame_index=frame_layers.index)
                raise
        logger.debug("Traced frame %d: %d layers", frame_layers.index, len(layers))
        return FrameSVG(index=frame_layers.index, layers=layers)

