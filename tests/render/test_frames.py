"""Tests for per-frame rendering."""

import numpy as np
import pytest

from analyze.models import AnalysisResult, CommitterRegistry, FileInfo, LineChange
from common.constants import BACKGROUND_COLOR
from render.colors import committer_palette, heat_color
from render.config import ColorMode, RenderConfig
from render.frames import last_committer, line_heat, pixel_layout, render_frame

DAY = 86_400


def config(mode=ColorMode.HEAT, width=4, height=4, window_days=1) -> RenderConfig:
    return RenderConfig(width=width, height=height, window_days=window_days, mode=mode)


@pytest.fixture
def deleted_line_analysis():
    """a.txt has 3 lines at t=0; bob deletes line 2 at t=120."""
    return AnalysisResult(
        files=(FileInfo(0, "a.txt", birth_time=0, line_counts={0: 3, 120: 2}),),
        changes={(0, 2): [LineChange(120, 1)]},
        committers=CommitterRegistry(["alice", "bob"]),
        start_time=0,
        end_time=240,
        commits=(("c0", 0), ("c1", 120), ("c2", 240)),
    )


@pytest.fixture
def two_file_analysis():
    """a.txt lives in [0, 600); b.txt is born at 0 and edited by two committers."""
    return AnalysisResult(
        files=(
            FileInfo(0, "a.txt", birth_time=0, death_time=600, line_counts={0: 2}),
            FileInfo(1, "b.txt", birth_time=0, line_counts={0: 4, 300: 4}),
        ),
        changes={
            (0, 1): [LineChange(0, 0)],
            (1, 1): [LineChange(300, 0), LineChange(540, 1)],
            (1, 3): [LineChange(300, 1)],
        },
        committers=CommitterRegistry(["alice", "bob"]),
        start_time=0,
        end_time=1200,
        commits=(("c0", 0), ("c1", 300), ("c2", 540), ("c3", 600), ("c4", 1200)),
    )


class TestLineQueries:
    history = [LineChange(100, 0), LineChange(200, 1), LineChange(200, 2), LineChange(900, 3)]

    def test_heat_counts_inclusive_window(self):
        assert line_heat(self.history, 100, 200) == 3
        assert line_heat(self.history, 101, 899) == 2
        assert line_heat(self.history, 901, 2000) == 0

    def test_wider_window_never_lowers_heat(self):
        for end in range(0, 1000, 50):
            for width in (50, 100, 400):
                narrow = line_heat(self.history, end - width, end)
                wide = line_heat(self.history, end - 2 * width, end)
                assert wide >= narrow

    def test_last_committer_at_or_before(self):
        assert last_committer(self.history, 50) is None
        assert last_committer(self.history, 100) == 0
        assert last_committer(self.history, 899) == 2
        assert last_committer(self.history, 5000) == 3


class TestPixelLayout:
    def test_columns_split_evenly(self):
        columns, rows = pixel_layout(6, 4, 3, 8)
        assert columns.tolist() == [0, 0, 1, 1, 2, 2]
        assert rows.tolist() == [0, 2, 4, 6]

    def test_rows_repeat_when_lines_are_few(self):
        _, rows = pixel_layout(1, 4, 1, 2)
        assert rows.tolist() == [0, 0, 1, 1]


class TestRenderFrame:
    def test_deleted_line_example(self, deleted_line_analysis):
        # Frame 2 is t=120, the minute of bob's delete
        image = render_frame(deleted_line_analysis, 2, config(height=2), committer_palette(2))

        assert image.shape == (2, 4, 3)
        assert (image[0] == BACKGROUND_COLOR).all()
        assert (image[1] == heat_color(1)).all()

    def test_before_the_edit_everything_is_background(self, deleted_line_analysis):
        image = render_frame(deleted_line_analysis, 1, config(height=3), committer_palette(2))
        assert (image == BACKGROUND_COLOR).all()

    def test_heat_cools_after_the_window(self, two_file_analysis):
        cfg = RenderConfig(width=2, height=4, window_days=1)
        later = (DAY + 600) // 60
        analysis = AnalysisResult(
            files=two_file_analysis.files,
            changes=two_file_analysis.changes,
            committers=two_file_analysis.committers,
            start_time=0,
            end_time=DAY + 600,
            commits=two_file_analysis.commits + (("c5", DAY + 600),),
        )

        image = render_frame(analysis, later, cfg, committer_palette(2))

        assert (image == BACKGROUND_COLOR).all()

    def test_committer_mode_uses_last_committer(self, two_file_analysis):
        palette = committer_palette(2)
        cfg = config(mode=ColorMode.COMMITTER, width=2, height=4)

        image = render_frame(two_file_analysis, 9, cfg, palette)  # t=540

        b_column = image[:, 1]
        assert (b_column[0] == palette[1]).all()
        assert (b_column[1] == BACKGROUND_COLOR).all()
        assert (b_column[2] == palette[1]).all()
        assert (b_column[3] == BACKGROUND_COLOR).all()

        earlier = render_frame(two_file_analysis, 5, cfg, palette)  # t=300
        assert (earlier[0, 1] == palette[0]).all()

    def test_short_file_leaves_blank_rows(self, two_file_analysis):
        cfg = config(mode=ColorMode.COMMITTER, width=2, height=4)
        image = render_frame(two_file_analysis, 9, cfg, committer_palette(2))

        # a.txt has 2 of 4 lines
        assert (image[0, 0] == committer_palette(2)[0]).all()
        assert (image[2:, 0] == BACKGROUND_COLOR).all()

    def test_deleted_file_disappears(self, two_file_analysis):
        cfg = config(mode=ColorMode.COMMITTER, width=2, height=4)
        palette = committer_palette(2)

        for index in range(two_file_analysis.frame_count):
            t = two_file_analysis.frame_time(index)
            image = render_frame(two_file_analysis, index, cfg, palette)
            if t < 600:
                # a.txt owns the left column and its line 1 is alice's
                assert (image[0, 0] == palette[0]).all()
            else:
                # b.txt alone fills the width
                assert (image[0, 0] == image[0, 1]).all()
                assert (image[0, 0] == palette[1]).all()

    def test_no_files_is_all_background(self):
        analysis = AnalysisResult(
            files=(),
            changes={},
            committers=CommitterRegistry(),
            start_time=0,
            end_time=0,
            commits=(("c0", 0),),
        )
        image = render_frame(analysis, 0, config(), committer_palette(0))
        assert (image == BACKGROUND_COLOR).all()

    def test_deterministic(self, two_file_analysis):
        cfg = config(mode=ColorMode.COMMITTER, width=16, height=9)
        first = render_frame(two_file_analysis, 12, cfg, committer_palette(2))
        second = render_frame(two_file_analysis, 12, cfg, committer_palette(2))
        np.testing.assert_array_equal(first, second)


class TestRenderConfig:
    def test_rejects_non_positive_sizes(self):
        with pytest.raises(ValueError):
            RenderConfig(width=0, height=10, window_days=1)
        with pytest.raises(ValueError):
            RenderConfig(width=10, height=10, window_days=0)

    def test_mode_accepts_strings(self):
        assert RenderConfig(width=1, height=1, window_days=1, mode="committer").mode is ColorMode.COMMITTER

    def test_window_seconds(self):
        assert RenderConfig(width=1, height=1, window_days=30).window_seconds == 30 * DAY
