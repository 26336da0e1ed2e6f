"""Size-bounded output segments.

Script text is written line by line into ``{prefix}_0.bas``,
``{prefix}_1.bas`` and so on. A line costs its UTF-8 length plus one byte
for the newline. A segment is closed before a line that would push it past
``max_size``, unless the segment is still empty, so a single oversized line
gets a segment of its own and lines are never split.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from video2bas.contracts import IOFailure, InvalidInput
from video2bas.setup_directories import get_segment_path

__all__ = ['SegmentWriter', 'write_segments']

logger = logging.getLogger(__name__)


class SegmentWriter:
    """Incremental segment writer.

    Parameters
    ----------
    prefix : str or Path
        Output prefix; segment ``i`` is ``{prefix}_{i}.{extension}``.
    max_size : int
        Byte budget per segment (>= 1).
    extension : str
        Segment file extension, without the dot.

    Examples
    --------
    >>> with SegmentWriter("out/clip", 2 * 1024 * 1024) as writer:
    ...     for line in lines:
    ...         writer.write_line(line)
    >>> writer.segment_count
    1
    """

    def __init__(self, prefix, max_size: int, extension: str = "bas"):
        if max_size < 1:
            raise InvalidInput(f"max_size must be >= 1, got {max_size}", stage="write")
        self.prefix = str(prefix)
        self.max_size = max_size
        self.extension = extension
        self.paths: List[Path] = []
        self._file = None
        self._size = 0

    @property
    def segment_count(self) -> int:
        return len(self.paths)

    @property
    def current_size(self) -> int:
        return self._size

    def _open_next(self):
        self._close_current()
        path = get_segment_path(self.prefix, len(self.paths), self.extension)
        try:
            self._file = open(path, "w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise IOFailure(f"cannot create segment {path}: {e}", stage="write") from e
        self.paths.append(path)
        self._size = 0
        logger.debug("Opened segment %s", path)

    def _close_current(self):
        if self._file is None:
            return
        path = self.paths[-1]
        try:
            self._file.close()
        except OSError as e:
            raise IOFailure(f"cannot close segment {path}: {e}", stage="write") from e
        finally:
            self._file = None

    def write_line(self, line: str) -> None:
        """Append one line, rolling over to a new segment when needed."""
        line_size = len(line.encode("utf-8")) + 1
        if self._file is None or (self._size > 0 and self._size + line_size > self.max_size):
            self._open_next()
        try:
            self._file.write(line + "\n")
        except OSError as e:
            raise IOFailure(f"cannot write segment {self.paths[-1]}: {e}", stage="write") from e
        self._size += line_size

    def write_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write_line(line)

    def close(self) -> None:
        self._close_current()

    def __enter__(self) -> "SegmentWriter":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def write_segments(lines: Iterable[str], max_size: int, prefix,
                   extension: str = "bas", paths: Optional[List[Path]] = None) -> int:
    """Write ``lines`` into size-bounded segments.

    Parameters
    ----------
    lines : iterable of str
        Lines without trailing newlines.
    max_size : int
        Byte budget per segment.
    prefix : str or Path
        Output prefix.
    extension : str, optional
        Segment extension (default ``"bas"``).
    paths : list, optional
        If given, the created segment paths are appended to it.

    Returns
    -------
    int
        Number of segments created; 0 when there are no lines.

    Raises
    ------
    InvalidInput
        If ``max_size`` < 1.
    IOFailure
        If a segment cannot be created or written. Segments completed
        before the failure stay on disk.
    """
    with SegmentWriter(prefix, max_size, extension=extension) as writer:
        writer.write_lines(lines)
    if paths is not None:
        paths.extend(writer.paths)
    logger.info("Wrote %d segment(s) with prefix %s", writer.segment_count, prefix)
    return writer.segment_count
