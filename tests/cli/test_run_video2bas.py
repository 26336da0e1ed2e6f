"""Tests for the video2bas command-line runner."""

import pytest

pytestmark = pytest.mark.unit

from video2bas.cli import run_video2bas as runner
from video2bas.contracts import DecodeFailure
from video2bas.pipeline.orchestrator import RunSummary


class _RecordingOrchestrator:
    """Stands in for ConversionOrchestrator and remembers its config."""

    configs = []

    def __init__(self, config):
        self.config = config
        _RecordingOrchestrator.configs.append(config)

    def run(self, video_path):
        return RunSummary(frames=2, segments=1, segment_paths=[])


@pytest.fixture
def recording_orchestrator(monkeypatch):
    _RecordingOrchestrator.configs = []
    monkeypatch.setattr(runner, "ConversionOrchestrator", _RecordingOrchestrator)
    return _RecordingOrchestrator


@pytest.fixture
def user_config_file(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text('CONFIG = {"FPS": 6, "COLORS": 3, "OUTPUT": "from_file.bas"}\n')
    return path


class TestLoadUserConfig:

    def test_loads_config_dict(self, user_config_file):
        assert runner.load_user_config_dict(str(user_config_file)) == {
            "FPS": 6, "COLORS": 3, "OUTPUT": "from_file.bas"
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            runner.load_user_config_dict(str(tmp_path / "nope.py"))

    def test_missing_config_dict(self, tmp_path):
        path = tmp_path / "empty.py"
        path.write_text("SETTINGS = 1\n")
        with pytest.raises(ValueError, match="No CONFIG dict"):
            runner.load_user_config_dict(str(path))


class TestRunPipeline:

    def test_defaults(self, recording_orchestrator, capsys):
        summary = runner.run_video2bas_pipeline("clip.mp4")

        assert summary.frames == 2
        config = recording_orchestrator.configs[0]
        assert config.decoder.fps == 10
        assert "clip.mp4" in capsys.readouterr().out

    def test_cli_overrides_user_file(self, recording_orchestrator, user_config_file):
        runner.run_video2bas_pipeline(
            "clip.mp4", str(user_config_file),
            cli_args={"colors": 5, "output": None},
        )

        config = recording_orchestrator.configs[0]
        assert config.decoder.fps == 6
        assert config.quantizer.color_count == 5
        assert config.output.prefix == "from_file.bas"

    def test_verbose_enables_debug(self, recording_orchestrator, capsys):
        runner.run_video2bas_pipeline("clip.mp4", verbose=True)

        assert recording_orchestrator.configs[0].logging.level == "DEBUG"
        assert "Full Internal Configuration" in capsys.readouterr().out


class TestMain:

    def test_parser_flags(self):
        args = runner.build_parser().parse_args(
            ["--video", "a.mp4", "--fps", "12", "--low-memory", "--maxsize", "100"]
        )
        assert args.video == "a.mp4"
        assert args.fps == 12
        assert args.low_memory is True
        assert args.maxsize == 100
        assert args.parallel is None

    def test_video_is_required(self):
        with pytest.raises(SystemExit):
            runner.build_parser().parse_args([])

    def test_success_exit_code(self, recording_orchestrator, capsys):
        code = runner.main(["--video", "a.mp4", "--colors", "2", "--parallel", "3"])

        assert code == 0
        config = recording_orchestrator.configs[0]
        assert config.quantizer.color_count == 2
        assert config.runner.parallel == 3
        assert "Wrote 1 segment(s) for 2 frame(s)" in capsys.readouterr().out

    def test_low_memory_flag_forces_single_worker(self, recording_orchestrator, capsys):
        runner.main(["--video", "a.mp4", "--low-memory", "--parallel", "8"])

        config = recording_orchestrator.configs[0]
        assert config.runner.low_memory is True
        assert config.runner.parallel == 1

    def test_conversion_failure_exit_code(self, monkeypatch, capsys):
        def fail(*args, **kwargs):
            raise DecodeFailure("cannot open video: a.mp4", stage="decode")

        monkeypatch.setattr(runner, "run_video2bas_pipeline", fail)

        assert runner.main(["--video", "a.mp4"]) == 1
        assert "Conversion failed" in capsys.readouterr().err

    def test_config_error_exit_code(self, tmp_path, capsys):
        code = runner.main(["--video", "a.mp4", "--config", str(tmp_path / "missing.py")])

        assert code == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_invalid_value_exit_code(self, recording_orchestrator, capsys):
        assert runner.main(["--video", "a.mp4", "--maxsize", "0"]) == 2
