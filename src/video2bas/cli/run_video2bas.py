"""Core conversion runner.

This module contains the actual pipeline runner and the ``video2bas``
console entry point. Scripts are thin wrappers; this is the real
implementation.
"""

import argparse
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from video2bas.contracts import Video2BasError
from video2bas.pipeline.orchestrator import ConversionOrchestrator, RunSummary
from video2bas.schemas import CLIConfig, ParamConfig, UserConfig, resolve_config

__all__ = ['load_user_config_dict', 'run_video2bas_pipeline', 'build_parser', 'main']

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_video2bas_pipeline(
    video_path: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False
) -> RunSummary:
    """Convert one video into BAS script segments.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Builds the orchestrator
    3. Runs the conversion and returns its summary

    Parameters
    ----------
    video_path : str
        Input video file.
    user_config_path : str, optional
        Python file with a CONFIG dict. Defaults apply when omitted.
    cli_args : dict, optional
        CLI overrides. Keys: fps, width, colors, output, maxsize, parallel,
        low_memory, log_level. None values are ignored.
    verbose : bool, optional
        If True, enable DEBUG logging and print the resolved config.

    Returns
    -------
    RunSummary

    Examples
    --------
    Run with defaults::

        run_video2bas_pipeline("clip.mp4")

    Run with a user config and CLI overrides::

        run_video2bas_pipeline(
            "clip.mp4",
            "scripts/user_config.py",
            cli_args={"fps": 12, "colors": 6, "output": "out/clip.bas"},
        )
    """
    param_cfg = ParamConfig()

    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))
    else:
        user_cfg = UserConfig()

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"

    # Filter None values
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    # Resolve to internal config (Param < User < CLI)
    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    print(f"\n{'='*60}")
    print("video2bas")
    print('='*60)
    print(f"Video:    {video_path}")
    print(f"Config:   {user_config_path or '(defaults)'}")
    print(f"Frames:   {config.decoder.fps} fps, width {config.decoder.max_width}")
    print(f"Colors:   {config.quantizer.color_count}")
    print(f"Output:   {config.output.prefix}_N.{config.output.extension}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    orchestrator = ConversionOrchestrator(config)
    return orchestrator.run(video_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="video2bas",
        description="Convert a video into layered vector BAS animation scripts",
    )
    parser.add_argument("--video", required=True, help="Input video file")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--fps", type=int, help="Frames per second to sample")
    parser.add_argument("--width", type=int, help="Frame width in pixels")
    parser.add_argument("--colors", type=int, help="Palette size per frame")
    parser.add_argument("--output", help="Output prefix (segments are PREFIX_N.bas)")
    parser.add_argument("--maxsize", type=int, help="Maximum segment size in bytes")
    parser.add_argument("--parallel", type=int, help="Concurrent frame workers")
    parser.add_argument("--low-memory", action="store_true", default=None,
                        help="Process frames one at a time (forces --parallel 1)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    cli_args = {
        "fps": args.fps,
        "width": args.width,
        "colors": args.colors,
        "output": args.output,
        "maxsize": args.maxsize,
        "parallel": args.parallel,
        "low_memory": args.low_memory,
    }

    try:
        summary = run_video2bas_pipeline(args.video, args.config, cli_args=cli_args,
                                         verbose=args.verbose)
    except Video2BasError as e:
        print(f"Conversion failed: {e}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    print(f"\nWrote {summary.segments} segment(s) for {summary.frames} frame(s)")
    for path in summary.segment_paths:
        print(f"  {path}")
    if summary.failed_frames:
        print(f"Skipped frames: {summary.failed_frames}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
