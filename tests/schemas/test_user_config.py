"""Test UserConfig aliases, normalization and nested overrides."""

import pytest
from pydantic import ValidationError

pytestmark = pytest.mark.unit

from video2bas.schemas import ParamConfig, UserConfig, resolve_config


class TestUserConfigAliases:
    """Flat uppercase aliases map to nested sections."""

    def test_flat_aliases(self):
        user = UserConfig.model_validate({
            "FPS": 15,
            "MAX_WIDTH": 64,
            "COLORS": 3,
            "OUTPUT": "out/clip.bas",
            "MAX_SEGMENT_BYTES": 4096,
            "PARALLEL": 2,
            "SAVE_FRAME_JSON": True,
            "FAILURE_POLICY": "collect",
            "START_TIME_MS": 250,
        })
        config = resolve_config(ParamConfig(), user, None)

        assert config.decoder.fps == 15
        assert config.decoder.max_width == 64
        assert config.quantizer.color_count == 3
        assert config.output.prefix == "out/clip.bas"
        assert config.output.max_segment_bytes == 4096
        assert config.output.save_frame_json is True
        assert config.runner.parallel == 2
        assert config.runner.failure_policy == "collect"
        assert config.script.start_time_ms == 250.0

    def test_field_names_also_accepted(self):
        user = UserConfig(fps=7, output_prefix="x.bas")
        assert user.fps == 7
        assert user.output_prefix == "x.bas"

    def test_unknown_legacy_keys_ignored(self):
        user = UserConfig.model_validate({"FFMPEG_PATH": "/usr/bin/ffmpeg", "FPS": 5})
        assert user.fps == 5

    def test_nested_section_wins_over_flat_alias(self):
        user = UserConfig.model_validate({"FPS": 5, "decoder": {"fps": 9}})
        config = resolve_config(ParamConfig(), user, None)
        assert config.decoder.fps == 9

    def test_nested_tracer_options(self):
        user = UserConfig.model_validate({"tracer": {"turdsize": 0, "opttolerance": 0.5}})
        config = resolve_config(ParamConfig(), user, None)
        assert config.tracer.turdsize == 0
        assert config.tracer.opttolerance == 0.5


class TestUserConfigNormalization:

    def test_trace_method_lowercased(self):
        user = UserConfig.model_validate({"TRACE_METHOD": " Potrace "})
        assert resolve_config(ParamConfig(), user, None).tracer.method == "potrace"

    def test_log_level_uppercased(self):
        user = UserConfig.model_validate({"LOG_LEVEL": "debug"})
        assert resolve_config(ParamConfig(), user, None).logging.level == "DEBUG"

    def test_palette_normalized(self):
        user = UserConfig.model_validate({"PALETTE": ["#ff8800", "00aaFF"]})
        config = resolve_config(ParamConfig(), user, None)
        assert config.quantizer.palette == ["FF8800", "00AAFF"]

    def test_skip_colors_normalized(self):
        user = UserConfig.model_validate({"SKIP_COLORS": ["#ffffff"]})
        assert resolve_config(ParamConfig(), user, None).script.skip_colors == ["FFFFFF"]

    @pytest.mark.parametrize("bad", [["FFF"], ["GGGGGG"], [123]])
    def test_invalid_palette_rejected(self, bad):
        with pytest.raises(ValidationError):
            UserConfig.model_validate({"PALETTE": bad})

    def test_user_model_not_mutated_by_resolution(self):
        user = UserConfig(fps=5)
        resolve_config(ParamConfig(), user, {"fps": 30})
        assert user.fps == 5
