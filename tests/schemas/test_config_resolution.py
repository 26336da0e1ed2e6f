"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

pytestmark = pytest.mark.unit

from video2bas.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig
from video2bas.schemas.resolve import deep_merge, resolve_config


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.decoder.fps == 10
        assert config.decoder.max_width == 96
        assert config.quantizer.color_count == 4
        assert config.quantizer.palette is None
        assert config.tracer.method == "contours"
        assert config.script.skip_colors == ["000000"]
        assert config.output.prefix == "output.bas"
        assert config.output.max_segment_bytes == 2 * 1024 * 1024
        assert config.runner.parallel == 4
        assert config.runner.failure_policy == "fail_fast"
        assert config.logging.level == "INFO"

    def test_user_config_overrides_param_config(self):
        config = resolve_config(ParamConfig(), UserConfig(color_count=6), None)
        assert config.quantizer.color_count == 6

    def test_full_precedence_param_user_cli(self):
        user = UserConfig(fps=12, color_count=6, output_prefix="user.bas")
        cli = CLIConfig(colors=8, output="cli.bas")
        config = resolve_config(ParamConfig(), user, cli)

        assert config.decoder.fps == 12          # user wins over param
        assert config.quantizer.color_count == 8  # CLI wins over user
        assert config.output.prefix == "cli.bas"

    def test_dict_inputs_accepted(self):
        config = resolve_config({}, {"FPS": 24}, {"width": 48})
        assert config.decoder.fps == 24
        assert config.decoder.max_width == 48

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.decoder = None


class TestNormalization:

    @pytest.mark.parametrize("fps", [0, -5])
    def test_non_positive_fps_becomes_one(self, fps):
        config = resolve_config(ParamConfig(), UserConfig(fps=fps), None)
        assert config.decoder.fps == 1

    @pytest.mark.parametrize("parallel", [0, -1])
    def test_non_positive_parallel_becomes_one(self, parallel):
        config = resolve_config(ParamConfig(), None, CLIConfig(parallel=parallel))
        assert config.runner.parallel == 1

    def test_low_memory_forces_parallel_one(self):
        config = resolve_config(ParamConfig(), UserConfig(low_memory=True, parallel=8), None)
        assert config.runner.parallel == 1

    def test_cli_parallel_cannot_undo_low_memory(self):
        user = UserConfig(low_memory=True)
        config = resolve_config(ParamConfig(), user, CLIConfig(parallel=6))
        assert config.runner.low_memory is True
        assert config.runner.parallel == 1

    def test_cli_low_memory_pins_parallel(self):
        cli = CLIConfig(low_memory=True, parallel=6)
        assert cli.parallel == 1


class TestValidation:

    def test_zero_colors_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(color_count=0), None)

    def test_bad_trace_method_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(trace_method="autotrace"), None)

    def test_param_config_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            ParamConfig(unknown_section={})

    def test_zero_segment_size_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), None, CLIConfig(maxsize=0))


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}
    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
