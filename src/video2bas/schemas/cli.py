"""CLIConfig: Command-line operational overrides.

Minimal configuration for parameters that commonly change between runs:
frame rate, width, palette size, output prefix, segment size, parallelism.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import model_validator
from video2bas.schemas.base import Video2BasBaseModel


class CLIConfig(Video2BasBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Notes
    -----
    ``low_memory=True`` also pins ``parallel`` to 1 here, so a CLI
    ``--parallel`` can never re-enable concurrency in low-memory runs.

    Usage
    -----
        cli_cfg = CLIConfig(fps=12, colors=6, output="out/clip")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    fps: Optional[int] = None
    width: Optional[int] = None
    colors: Optional[int] = None
    output: Optional[str] = None
    maxsize: Optional[int] = None
    parallel: Optional[int] = None
    low_memory: Optional[bool] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @model_validator(mode="after")
    def pin_parallel_in_low_memory(self):
        """Serial mode implies a single worker."""
        if self.low_memory:
            self.parallel = 1
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        decoder = {}
        if self.fps is not None:
            decoder["fps"] = self.fps
        if self.width is not None:
            decoder["max_width"] = self.width
        if decoder:
            overrides["decoder"] = decoder

        if self.colors is not None:
            overrides["quantizer"] = {"color_count": self.colors}

        output = {}
        if self.output is not None:
            output["prefix"] = self.output
        if self.maxsize is not None:
            output["max_segment_bytes"] = self.maxsize
        if output:
            overrides["output"] = output

        runner = {}
        if self.parallel is not None:
            runner["parallel"] = self.parallel
        if self.low_memory is not None:
            runner["low_memory"] = self.low_memory
        if runner:
            overrides["runner"] = runner

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
