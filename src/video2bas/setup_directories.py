"""
Output locations for a conversion run.

Everything a run writes sits next to the output prefix:
- Script segments: {prefix}_{index}.{extension} (0-based, no padding)
- Frame export:    {prefix}_frames.jsonl
- Run log:         {prefix dir}/logs/video2bas.log
"""

from pathlib import Path


def setup_output_directories(prefix):
    """
    Create the directories a run writes into.

    Parameters
    ----------
    prefix : str or Path
        Output prefix, e.g. ``"out/clip.bas"``. Its parent directory becomes
        the base directory.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'logs'
    """
    base_output_dir = Path(prefix).expanduser().resolve().parent

    directories = {
        "base": base_output_dir,
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def get_segment_path(prefix, index, extension="bas"):
    """
    Path of output segment ``index``.

    Example
    -------
    >>> get_segment_path("output.bas", 2)
    PosixPath('output.bas_2.bas')
    """
    extension = extension[1:] if extension.startswith('.') else extension
    return Path(f"{prefix}_{index}.{extension}")


def get_frame_json_path(prefix):
    """Path of the JSON Lines frame export."""
    return Path(f"{prefix}_frames.jsonl")


def get_log_path(output_dirs):
    """Path of the run log inside the ``logs`` directory."""
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "video2bas.log"
