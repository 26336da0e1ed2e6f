"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on
(except the global palette, whose absence selects per-frame quantization).
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from video2bas.schemas.base import Video2BasBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalDecoderConfig(Video2BasBaseModel):
    """Runtime decoder configuration."""
    fps: int = Field(ge=1)
    max_width: int = Field(ge=1)


class InternalQuantizerConfig(Video2BasBaseModel):
    """Runtime palette configuration."""
    color_count: int = Field(ge=1)
    palette: Optional[list[str]]


class InternalTracerConfig(Video2BasBaseModel):
    """Runtime tracer configuration."""
    method: Literal["contours", "potrace"]
    potrace_path: str
    turdsize: int
    alphamax: float
    opttolerance: float
    timeout_sec: float


class InternalScriptConfig(Video2BasBaseModel):
    """Runtime script configuration."""
    start_time_ms: float
    skip_colors: list[str]
    viewbox_scale: int
    strict_paths: bool


class InternalOutputConfig(Video2BasBaseModel):
    """Runtime output configuration."""
    prefix: str
    extension: str
    max_segment_bytes: int = Field(ge=1)
    save_frame_json: bool


class InternalRunnerConfig(Video2BasBaseModel):
    """Runtime runner configuration."""
    parallel: int = Field(ge=1)
    low_memory: bool
    failure_policy: Literal["fail_fast", "collect"]
    progress_interval_sec: float


class InternalLoggingConfig(Video2BasBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(Video2BasBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.color_count = config.quantizer.color_count  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code

    All of that happens during config resolution.
    """

    decoder: InternalDecoderConfig
    quantizer: InternalQuantizerConfig
    tracer: InternalTracerConfig
    script: InternalScriptConfig
    output: InternalOutputConfig
    runner: InternalRunnerConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
