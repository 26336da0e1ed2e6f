"""Conversion pipeline orchestration.

Drives a video through decode -> classify -> trace -> parse -> generate ->
write. Two execution modes share the same per-frame code:

- **Batch** (default): each stage runs over all frames with the bounded
  parallel batch runner before the next stage starts.
- **Serial** (``runner.low_memory``): frames are decoded lazily and taken
  through every stage one at a time, the script text streamed into the
  segment writer, so only one frame's intermediates are alive at once.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from video2bas.contracts import FailurePolicy, IOFailure, Video2BasError
from video2bas.pipeline.batch_runner import BatchResult, ProgressCounter, ProgressTicker, run_batch
from video2bas.pipeline.processor import FrameProcessor
from video2bas.pipeline.segment_writer import SegmentWriter
from video2bas.raster.decoder import VideoFrameDecoder
from video2bas.setup_directories import get_frame_json_path, get_log_path, setup_output_directories
from video2bas.types import FrameData, FrameSVG
from video2bas.vector.script_generator import generate_frame_text
from video2bas.vector.svg_parser import parse_viewbox

if TYPE_CHECKING:
    from video2bas.schemas import InternalConfig

__all__ = ['ConversionOrchestrator', 'RunSummary']

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """What a conversion run produced."""
    frames: int = 0
    segments: int = 0
    segment_paths: List[Path] = field(default_factory=list)
    failed_frames: List[int] = field(default_factory=list)
    frame_json_path: Optional[Path] = None
    elapsed_sec: float = 0.0


def _item_index(item) -> int:
    """Frame index carried by any per-frame stage value."""
    if hasattr(item, "frame_index"):
        return item.frame_index
    return item.index


class ConversionOrchestrator:
    """Runs one video conversion according to ``InternalConfig``.

    Parameters
    ----------
    config : InternalConfig
        Fully validated runtime configuration.
    decoder : VideoFrameDecoder, optional
        Decoder override (tests substitute synthetic frames here).
    processor : FrameProcessor, optional
        Per-frame stage runner override.

    Example usage::

        config = resolve_config(ParamConfig(), user_cfg, cli_cfg)
        summary = ConversionOrchestrator(config).run("clip.mp4")
        print(summary.segments, summary.segment_paths)
    """

    def __init__(self, config: "InternalConfig",
                 decoder: Optional[VideoFrameDecoder] = None,
                 processor: Optional[FrameProcessor] = None):
        self.config = config
        self.decoder = decoder if decoder is not None else VideoFrameDecoder(config)
        self.processor = processor if processor is not None else FrameProcessor(config)

        self.parallel = config.runner.parallel
        self.policy = FailurePolicy(config.runner.failure_policy)
        self.prefix = config.output.prefix

        self.output_dirs = None
        self._file_handler = None
        self._failed: List[int] = []
        self._canvas: Optional[Tuple[int, int]] = None

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _setup_logging(self):
        """Configure the root logger with console and file handlers.

        The log file lives at ``{output dir}/logs/video2bas.log``.
        """
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)
        log_path = get_log_path(self.output_dirs)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)
        self._file_handler = fh

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

    def _close_log_file(self):
        if self._file_handler is None:
            return
        logging.getLogger().removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None

    # ------------------------------------------------------------------
    # Stage helpers
    # ------------------------------------------------------------------

    def _run_stage(self, name: str, items: Sequence, worker: Callable) -> list:
        """Map ``worker`` over ``items``; under ``collect`` drop failed items."""
        if not items:
            return []

        counter = ProgressCounter(total=len(items))
        ticker = ProgressTicker(counter, label=name,
                                interval=self.config.runner.progress_interval_sec,
                                name=f"{name}-progress")
        logger.info("Stage %s: %d frames, parallel=%d", name, len(items), self.parallel)
        ticker.start()
        try:
            result = run_batch(items, worker, self.parallel, progress=counter, policy=self.policy)
        finally:
            ticker.stop()
            ticker.join()

        if not isinstance(result, BatchResult):
            return result

        for failure in result.failures:
            frame_index = _item_index(items[failure.index])
            logger.error("Dropping frame %d: %s", frame_index, failure.error)
            self._failed.append(frame_index)
        return result.succeeded()

    def _canvas_size(self, frame_svg: FrameSVG) -> Tuple[int, int]:
        """Script canvas from the viewBox of the first traced layer."""
        if self._canvas is None:
            _, _, width, height = parse_viewbox(frame_svg.layers[0].svg)
            scale = self.config.script.viewbox_scale
            self._canvas = (int(width) * scale, int(height) * scale)
            logger.info("Canvas size: %dx%d", *self._canvas)
        return self._canvas

    def _render(self, frame_data: FrameData) -> str:
        width, height = self._canvas
        script_cfg = self.config.script
        return generate_frame_text(
            frame_data, width, height, self.config.decoder.fps,
            start_time=script_cfg.start_time_ms,
            skip_colors=script_cfg.skip_colors,
            strict=script_cfg.strict_paths,
        )

    def _open_frame_json(self):
        if not self.config.output.save_frame_json:
            return None, None
        path = get_frame_json_path(self.prefix)
        try:
            return path, open(path, "w", encoding="utf-8")
        except OSError as e:
            raise IOFailure(f"cannot create frame export {path}: {e}", stage="write") from e

    @staticmethod
    def _write_frame_json(handle, path, frame_data: FrameData):
        try:
            handle.write(frame_data.to_json() + "\n")
        except OSError as e:
            raise IOFailure(f"cannot write frame export {path}: {e}", stage="write") from e

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def _run_batch_mode(self, video_path, summary: RunSummary):
        frames = self.decoder.decode(video_path)

        frame_layers = self._run_stage("classify", frames, self.processor.classify)
        del frames
        frame_svgs = self._run_stage("trace", frame_layers, self.processor.trace)
        del frame_layers

        if frame_svgs:
            self._canvas_size(frame_svgs[0])
        frame_data = self._run_stage("parse", frame_svgs, self.processor.parse)
        del frame_svgs

        rendered = self._run_stage("generate", frame_data,
                                   lambda fd: (fd, self._render(fd)))
        del frame_data
        texts = [text for _, text in rendered]

        json_path, handle = self._open_frame_json()
        if handle is not None:
            with handle:
                for fd, _ in rendered:
                    self._write_frame_json(handle, json_path, fd)
            summary.frame_json_path = json_path

        with SegmentWriter(self.prefix, self.config.output.max_segment_bytes,
                           extension=self.config.output.extension) as writer:
            writer.write_lines(texts)
        summary.frames = len(texts)
        summary.segments = writer.segment_count
        summary.segment_paths = list(writer.paths)

    def _run_serial_mode(self, video_path, summary: RunSummary):
        collect = self.policy == FailurePolicy.COLLECT
        json_path, handle = self._open_frame_json()
        writer = SegmentWriter(self.prefix, self.config.output.max_segment_bytes,
                               extension=self.config.output.extension)
        try:
            for frame in self.decoder.iter_frames(video_path):
                try:
                    frame_svg, frame_data = self.processor.process_traced(frame)
                    self._canvas_size(frame_svg)
                    text = self._render(frame_data)
                except Video2BasError as e:
                    if not collect:
                        raise
                    logger.error("Dropping frame %d: %s", frame.index, e)
                    self._failed.append(frame.index)
                    continue

                writer.write_line(text)
                if handle is not None:
                    self._write_frame_json(handle, json_path, frame_data)
                summary.frames += 1
                logger.debug("Frame %d written", frame.index)
        finally:
            writer.close()
            if handle is not None:
                handle.close()

        summary.segments = writer.segment_count
        summary.segment_paths = list(writer.paths)
        summary.frame_json_path = json_path

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, video_path, setup_logging: bool = True) -> RunSummary:
        """Convert ``video_path`` and return a ``RunSummary``.

        Parameters
        ----------
        video_path : str or Path
            Input video.
        setup_logging : bool, optional
            Install the console and file handlers on the root logger.

        Raises
        ------
        Video2BasError
            Any fatal stage failure (all of them under ``fail_fast``;
            decode and write failures under ``collect``).
        """
        self.output_dirs = setup_output_directories(self.prefix)
        if setup_logging:
            self._setup_logging()

        self._failed = []
        self._canvas = None
        summary = RunSummary()
        start = time.time()

        low_memory = self.config.runner.low_memory
        logger.info("=" * 60)
        logger.info("Converting %s (%s mode, policy=%s)", Path(video_path).name,
                    "serial" if low_memory else "batch", self.policy.value)
        logger.info("=" * 60)

        try:
            if low_memory:
                self._run_serial_mode(video_path, summary)
            else:
                self._run_batch_mode(video_path, summary)

            summary.failed_frames = sorted(self._failed)
            summary.elapsed_sec = time.time() - start
            logger.info("Done: %d frames, %d segment(s), %d failed, %.1f seconds",
                        summary.frames, summary.segments, len(summary.failed_frames),
                        summary.elapsed_sec)
            return summary
        finally:
            if setup_logging:
                self._close_log_file()
