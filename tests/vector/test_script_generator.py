"""Tests for BAS script text generation."""

import pytest

pytestmark = pytest.mark.unit

from video2bas.contracts import InvalidInput
from video2bas.types import FrameData
from video2bas.vector.script_generator import generate_all_text, generate_frame_text


def _frame(index, *layers):
    return FrameData(frame_index=index,
                     data=[{"color": c, "pathdata": d} for c, d in layers])


EXPECTED_BLOCK = """
let p2_FF0000 = path{d = "M10 80 L30 60" viewBox="0 0 960 100" width = 100% fillColor = 0xFF0000 alpha = 0
borderWidth = 15
    borderColor = 0xFF0000
}
set p2_FF0000 {} 200ms
then set p2_FF0000 {alpha = 1} 0ms
then set p2_FF0000 {} 100ms
then set p2_FF0000 {alpha = 0} 0ms
"""


class TestGenerateFrameText:

    def test_exact_block(self):
        frame = _frame(2, ("FF0000", "M10 20 L30 40"))
        assert generate_frame_text(frame, 960, 100, 10) == EXPECTED_BLOCK

    def test_black_layer_skipped_by_default(self):
        frame = _frame(0, ("000000", "M0 0"), ("FFFFFF", "M1 1"))
        text = generate_frame_text(frame, 100, 100, 10)
        assert "p0_000000" not in text
        assert "p0_FFFFFF" in text

    def test_custom_skip_colors(self):
        frame = _frame(0, ("000000", "M0 0"), ("FFFFFF", "M1 1"))
        text = generate_frame_text(frame, 100, 100, 10, skip_colors=["FFFFFF"])
        assert "p0_000000" in text
        assert "p0_FFFFFF" not in text

    def test_all_layers_skipped_gives_empty_text(self):
        assert generate_frame_text(_frame(0, ("000000", "M0 0")), 100, 100, 10) == ""

    def test_each_block_starts_with_newline(self):
        frame = _frame(1, ("111111", "M0 0"), ("222222", "M0 0"))
        text = generate_frame_text(frame, 100, 100, 10)
        assert text.count("\nlet p1_") == 2
        assert text.startswith("\nlet p1_111111")

    def test_start_offset_subtracts_start_time_and_floors(self):
        frame = _frame(1, ("FFFFFF", "M0 0"))
        text = generate_frame_text(frame, 100, 100, 3, start_time=10)
        # 1 / 3 * 1000 - 10 = 323.33 -> 323; 1000 / 3 = 333.33 -> 333
        assert "set p1_FFFFFF {} 323ms" in text
        assert "then set p1_FFFFFF {} 333ms" in text

    def test_negative_offset_floors_down(self):
        frame = _frame(0, ("FFFFFF", "M0 0"))
        text = generate_frame_text(frame, 100, 100, 10, start_time=0.5)
        assert "set p0_FFFFFF {} -1ms" in text

    def test_path_flipped_with_viewbox_height(self):
        frame = _frame(0, ("FFFFFF", "M0 10"))
        assert 'd = "M0 990"' in generate_frame_text(frame, 500, 1000, 10)

    def test_non_positive_framerate_rejected(self):
        with pytest.raises(InvalidInput, match="framerate"):
            generate_frame_text(_frame(0, ("FFFFFF", "M0 0")), 100, 100, 0)

    def test_strict_mode_rejects_malformed_path(self):
        with pytest.raises(InvalidInput):
            generate_frame_text(_frame(0, ("FFFFFF", "M0 ?")), 100, 100, 10, strict=True)


class TestGenerateAllText:

    def test_order_preserved(self):
        frames = [_frame(i, ("FFFFFF", f"M{i} 0")) for i in range(20)]
        texts = generate_all_text(frames, 100, 100, 10, parallel=4)
        assert len(texts) == 20
        for i, text in enumerate(texts):
            assert text.startswith(f"\nlet p{i}_FFFFFF")

    def test_parallel_matches_sequential(self):
        frames = [_frame(i, ("ABCDEF", "M1 2 L3 4")) for i in range(8)]
        assert (generate_all_text(frames, 100, 100, 10, parallel=1)
                == generate_all_text(frames, 100, 100, 10, parallel=3))

    def test_empty_input(self):
        assert generate_all_text([], 100, 100, 10) == []
