"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with aliases for the common flat naming
pattern (e.g., FPS → fps, COLORS → color_count, OUTPUT → output prefix).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient: uppercase and
lowercase keys, ints where floats are expected, unknown legacy keys ignored.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from video2bas.schemas.base import Video2BasBaseModel
from video2bas.schemas.param import normalize_hex_colors


class UserDecoderConfig(Video2BasBaseModel):
    """User-facing decoder config."""
    fps: Optional[int] = None
    max_width: Optional[int] = None


class UserQuantizerConfig(Video2BasBaseModel):
    """User-facing quantizer config."""
    color_count: Optional[int] = None
    palette: Optional[list[str]] = None

    @field_validator("palette", mode="before")
    @classmethod
    def validate_palette(cls, v):
        return normalize_hex_colors(v)


class UserTracerConfig(Video2BasBaseModel):
    """User-facing tracer config."""
    method: Optional[str] = None
    potrace_path: Optional[str] = None
    turdsize: Optional[int] = None
    alphamax: Optional[float] = None
    opttolerance: Optional[float] = None
    timeout_sec: Optional[float] = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserScriptConfig(Video2BasBaseModel):
    """User-facing script config."""
    start_time_ms: Optional[float] = None
    skip_colors: Optional[list[str]] = None
    viewbox_scale: Optional[int] = None
    strict_paths: Optional[bool] = None

    @field_validator("skip_colors", mode="before")
    @classmethod
    def validate_skip_colors(cls, v):
        return normalize_hex_colors(v)


class UserOutputConfig(Video2BasBaseModel):
    """User-facing output config."""
    prefix: Optional[str] = None
    extension: Optional[str] = None
    max_segment_bytes: Optional[int] = None
    save_frame_json: Optional[bool] = None


class UserRunnerConfig(Video2BasBaseModel):
    """User-facing runner config."""
    parallel: Optional[int] = None
    low_memory: Optional[bool] = None
    failure_policy: Optional[Literal["fail_fast", "collect"]] = None
    progress_interval_sec: Optional[float] = None


class UserConfig(Video2BasBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            fps=12,
            color_count=6,
            output_prefix="out/clip",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Decoder settings (flat aliases)
    fps: Optional[int] = Field(None, alias="FPS")
    max_width: Optional[int] = Field(None, alias="MAX_WIDTH")

    # Palette settings (flat aliases)
    color_count: Optional[int] = Field(None, alias="COLORS")
    palette: Optional[list[str]] = Field(None, alias="PALETTE")

    # Tracer settings (flat aliases)
    trace_method: Optional[str] = Field(None, alias="TRACE_METHOD")

    # Script settings (flat aliases)
    start_time_ms: Optional[float] = Field(None, alias="START_TIME_MS")
    skip_colors: Optional[list[str]] = Field(None, alias="SKIP_COLORS")

    # Output settings (flat aliases)
    output_prefix: Optional[str] = Field(None, alias="OUTPUT")
    max_segment_bytes: Optional[int] = Field(None, alias="MAX_SEGMENT_BYTES")
    save_frame_json: Optional[bool] = Field(None, alias="SAVE_FRAME_JSON")

    # Runner settings (flat aliases)
    parallel: Optional[int] = Field(None, alias="PARALLEL")
    low_memory: Optional[bool] = Field(None, alias="LOW_MEMORY")
    failure_policy: Optional[Literal["fail_fast", "collect"]] = Field(None, alias="FAILURE_POLICY")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    decoder: Optional[UserDecoderConfig] = None
    quantizer: Optional[UserQuantizerConfig] = None
    tracer: Optional[UserTracerConfig] = None
    script: Optional[UserScriptConfig] = None
    output: Optional[UserOutputConfig] = None
    runner: Optional[UserRunnerConfig] = None

    model_config = Video2BasBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("start_time_ms", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("trace_method", mode="before")
    @classmethod
    def normalize_method_names(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("palette", "skip_colors", mode="before")
    @classmethod
    def validate_colors(cls, v):
        return normalize_hex_colors(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Flat fields are applied first; explicit nested sections win over them.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        decoder = {}
        if self.fps is not None:
            decoder["fps"] = self.fps
        if self.max_width is not None:
            decoder["max_width"] = self.max_width
        if self.decoder is not None:
            decoder.update(self.decoder.model_dump(exclude_none=True))
        if decoder:
            overrides["decoder"] = decoder

        quantizer = {}
        if self.color_count is not None:
            quantizer["color_count"] = self.color_count
        if self.palette is not None:
            quantizer["palette"] = self.palette
        if self.quantizer is not None:
            quantizer.update(self.quantizer.model_dump(exclude_none=True))
        if quantizer:
            overrides["quantizer"] = quantizer

        tracer = {}
        if self.trace_method is not None:
            tracer["method"] = self.trace_method
        if self.tracer is not None:
            tracer.update(self.tracer.model_dump(exclude_none=True))
        if tracer:
            overrides["tracer"] = tracer

        script = {}
        if self.start_time_ms is not None:
            script["start_time_ms"] = self.start_time_ms
        if self.skip_colors is not None:
            script["skip_colors"] = self.skip_colors
        if self.script is not None:
            script.update(self.script.model_dump(exclude_none=True))
        if script:
            overrides["script"] = script

        output = {}
        if self.output_prefix is not None:
            output["prefix"] = self.output_prefix
        if self.max_segment_bytes is not None:
            output["max_segment_bytes"] = self.max_segment_bytes
        if self.save_frame_json is not None:
            output["save_frame_json"] = self.save_frame_json
        if self.output is not None:
            output.update(self.output.model_dump(exclude_none=True))
        if output:
            overrides["output"] = output

        runner = {}
        if self.parallel is not None:
            runner["parallel"] = self.parallel
        if self.low_memory is not None:
            runner["low_memory"] = self.low_memory
        if self.failure_policy is not None:
            runner["failure_policy"] = self.failure_policy
        if self.runner is not None:
            runner.update(self.runner.model_dump(exclude_none=True))
        if runner:
            overrides["runner"] = runner

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
