"""End-to-end tests for the conversion orchestrator.

The decoder is replaced with a fake that serves synthetic frames, so the
whole classify -> trace -> parse -> generate -> write chain runs for real.
"""

import json
import logging

import pytest

from video2bas.contracts import DecodeFailure, TraceFailure
from video2bas.pipeline.orchestrator import ConversionOrchestrator, RunSummary
from video2bas.pipeline.processor import FrameProcessor

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


class FakeDecoder:
    """Serves pre-built frames through both decoder entry points."""

    def __init__(self, frames):
        self.frames = frames

    def decode(self, path, fps=None, max_width=None):
        return list(self.frames)

    def iter_frames(self, path, fps=None, max_width=None):
        yield from self.frames


class FailingDecoder(FakeDecoder):

    def decode(self, path, fps=None, max_width=None):
        raise DecodeFailure("no frames extracted", stage="decode")

    def iter_frames(self, path, fps=None, max_width=None):
        raise DecodeFailure("no frames extracted", stage="decode")
        yield


@pytest.fixture
def restore_logging():
    """Undo the root-logger changes made by _setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def run_config(make_config, temp_dir):
    """Config factory writing into temp_dir."""
    def _make(**overrides):
        overrides.setdefault("output_prefix", str(temp_dir / "clip.bas"))
        overrides.setdefault("parallel", 2)
        return make_config(**overrides)
    return _make


def _script_text(summary):
    return "".join(p.read_text(encoding="utf-8") for p in summary.segment_paths)


def _run(config, frames, processor=None):
    orch = ConversionOrchestrator(config, decoder=FakeDecoder(frames), processor=processor)
    return orch.run("clip.mp4", setup_logging=False)


class TestBatchMode:

    def test_writes_script_for_every_frame(self, run_config, make_frames):
        summary = _run(run_config(), make_frames(3))

        assert isinstance(summary, RunSummary)
        assert summary.frames == 3
        assert summary.segments == 1
        assert summary.failed_frames == []
        text = _script_text(summary)
        for i in range(3):
            assert f"let p{i}_FFFFFF = path{{" in text
        # black layers are never emitted
        assert "_000000" not in text

    def test_canvas_from_first_viewbox(self, run_config, make_frames):
        summary = _run(run_config(), make_frames(2, height=12, width=16))
        assert 'viewBox="0 0 160 120"' in _script_text(summary)

    def test_frame_timing(self, run_config, make_frames):
        summary = _run(run_config(fps=4), make_frames(3))
        text = _script_text(summary)
        assert "set p2_FFFFFF {} 500ms" in text
        assert "then set p2_FFFFFF {} 250ms" in text

    def test_segments_split_between_frames(self, run_config, make_frames):
        summary = _run(run_config(max_segment_bytes=100), make_frames(4))
        assert summary.segments == 4
        for i, path in enumerate(summary.segment_paths):
            assert path.name == f"clip.bas_{i}.bas"
            assert f"let p{i}_FFFFFF" in path.read_text(encoding="utf-8")

    def test_frame_json_export(self, run_config, make_frames, temp_dir):
        summary = _run(run_config(save_frame_json=True), make_frames(3))
        assert summary.frame_json_path == temp_dir / "clip.bas_frames.jsonl"
        records = [json.loads(line) for line in summary.frame_json_path.read_text().splitlines()]
        assert [r["frameIndex"] for r in records] == [0, 1, 2]
        assert [d["color"] for d in records[0]["data"]] == ["000000", "FFFFFF"]

    def test_no_frame_json_by_default(self, run_config, make_frames, temp_dir):
        summary = _run(run_config(), make_frames(1))
        assert summary.frame_json_path is None
        assert not (temp_dir / "clip.bas_frames.jsonl").exists()

    def test_decode_failure_propagates(self, run_config):
        orch = ConversionOrchestrator(run_config(), decoder=FailingDecoder([]))
        with pytest.raises(DecodeFailure):
            orch.run("clip.mp4", setup_logging=False)


class TestSerialMode:

    def test_same_output_as_batch(self, run_config, make_frames, temp_dir):
        batch = _run(run_config(output_prefix=str(temp_dir / "batch")), make_frames(4))
        serial = _run(run_config(output_prefix=str(temp_dir / "serial"), low_memory=True),
                      make_frames(4))
        assert serial.frames == batch.frames == 4
        assert _script_text(serial) == _script_text(batch)

    def test_low_memory_forces_single_worker(self, run_config):
        config = run_config(low_memory=True, parallel=8)
        assert config.runner.parallel == 1

    def test_streams_segments(self, run_config, make_frames):
        summary = _run(run_config(low_memory=True, max_segment_bytes=100), make_frames(3))
        assert summary.segments == 3

    def test_frame_json_export(self, run_config, make_frames):
        summary = _run(run_config(low_memory=True, save_frame_json=True), make_frames(2))
        lines = summary.frame_json_path.read_text().splitlines()
        assert len(lines) == 2


class _FlakyProcessor(FrameProcessor):
    """Fails tracing for selected frame indices."""

    def __init__(self, config, bad):
        super().__init__(config)
        self.bad = set(bad)

    def trace(self, frame_layers):
        if frame_layers.index in self.bad:
            raise TraceFailure("tracer crashed", stage="trace", frame_index=frame_layers.index)
        return super().trace(frame_layers)


class TestFailurePolicy:

    @pytest.mark.parametrize("low_memory", [False, True])
    def test_fail_fast_raises(self, run_config, make_frames, low_memory):
        config = run_config(low_memory=low_memory)
        with pytest.raises(TraceFailure, match="frame=1"):
            _run(config, make_frames(3), processor=_FlakyProcessor(config, bad=[1]))

    @pytest.mark.parametrize("low_memory", [False, True])
    def test_collect_skips_failed_frames(self, run_config, make_frames, low_memory):
        config = run_config(low_memory=low_memory, failure_policy="collect")
        summary = _run(config, make_frames(4), processor=_FlakyProcessor(config, bad=[1, 3]))

        assert summary.failed_frames == [1, 3]
        assert summary.frames == 2
        text = _script_text(summary)
        assert "p0_FFFFFF" in text and "p2_FFFFFF" in text
        assert "p1_FFFFFF" not in text and "p3_FFFFFF" not in text

    def test_collect_with_first_frame_failing_uses_next_canvas(self, run_config, make_frames):
        config = run_config(failure_policy="collect")
        summary = _run(config, make_frames(2), processor=_FlakyProcessor(config, bad=[0]))
        assert summary.failed_frames == [0]
        assert 'viewBox="0 0 160 120"' in _script_text(summary)


class TestLogging:

    def test_log_file_created(self, run_config, make_frames, temp_dir, restore_logging):
        orch = ConversionOrchestrator(run_config(), decoder=FakeDecoder(make_frames(1)))
        orch.run("clip.mp4")

        log_path = temp_dir / "logs" / "video2bas.log"
        assert log_path.exists()
        content = log_path.read_text()
        assert " - video2bas.pipeline.orchestrator - INFO - " in content
        assert "Done: 1 frames" in content

    def test_file_handler_closed_after_run(self, run_config, make_frames, restore_logging):
        orch = ConversionOrchestrator(run_config(), decoder=FakeDecoder(make_frames(1)))
        orch.run("clip.mp4")
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)
