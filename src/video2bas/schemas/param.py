"""ParamConfig: Expert defaults for the conversion pipeline.

ALL pipeline parameters must have defaults here. No runtime code should
define fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

import re
from typing import Literal, Optional
from pydantic import Field, field_validator
from video2bas.schemas.base import Video2BasBaseModel

HEX_COLOR_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")


def normalize_hex_colors(values):
    """Validate ``RRGGBB`` strings and return them upper-case without '#'."""
    if values is None:
        return values
    normalized = []
    for value in values:
        if not isinstance(value, str) or not HEX_COLOR_RE.match(value.strip()):
            raise ValueError(f"Invalid hex color: {value!r}")
        normalized.append(value.strip().lstrip("#").upper())
    return normalized


# =============================================================================
# Nested Configuration Models
# =============================================================================

class DecoderConfig(Video2BasBaseModel):
    """Video decoding configuration."""
    fps: int = Field(10, description="Target frames per second; <= 0 falls back to 1")
    max_width: int = Field(96, ge=1, description="Maximum frame width in source pixels")


class QuantizerConfig(Video2BasBaseModel):
    """Palette configuration."""
    color_count: int = Field(4, ge=1, description="Palette size per frame")
    palette: Optional[list[str]] = Field(
        None, description="Global palette (RRGGBB); disables per-frame quantization"
    )

    @field_validator("palette", mode="before")
    @classmethod
    def validate_palette(cls, v):
        """Accept '#RRGGBB' or 'rrggbb', store 'RRGGBB'."""
        return normalize_hex_colors(v)


class TracerConfig(Video2BasBaseModel):
    """Mask tracing configuration."""
    method: Literal["contours", "potrace"] = "contours"
    potrace_path: str = "potrace"
    turdsize: int = Field(2, ge=0, description="potrace speckle suppression")
    alphamax: float = Field(1.0, ge=0)
    opttolerance: float = Field(0.2, ge=0)
    timeout_sec: float = Field(30.0, gt=0)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method_name(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class ScriptConfig(Video2BasBaseModel):
    """Script text generation configuration."""
    start_time_ms: float = 0.0
    skip_colors: list[str] = Field(default_factory=lambda: ["000000"])
    viewbox_scale: int = Field(10, ge=1, description="Script units per traced pixel")
    strict_paths: bool = False

    @field_validator("skip_colors", mode="before")
    @classmethod
    def validate_skip_colors(cls, v):
        return normalize_hex_colors(v)


class OutputConfig(Video2BasBaseModel):
    """Output segment configuration."""
    prefix: str = "output.bas"
    extension: str = "bas"
    max_segment_bytes: int = Field(2 * 1024 * 1024, ge=1)
    save_frame_json: bool = False


class RunnerConfig(Video2BasBaseModel):
    """Concurrency configuration."""
    parallel: int = Field(4, description="Concurrent workers; <= 0 is clamped to 1")
    low_memory: bool = False
    failure_policy: Literal["fail_fast", "collect"] = "fail_fast"
    progress_interval_sec: float = Field(5.0, gt=0)


class LoggingConfig(Video2BasBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(Video2BasBaseModel):
    """Complete expert configuration with all defaults.

    Serves as the base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    quantizer: QuantizerConfig = Field(default_factory=QuantizerConfig)
    tracer: TracerConfig = Field(default_factory=TracerConfig)
    script: ScriptConfig = Field(default_factory=ScriptConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
