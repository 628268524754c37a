"""Tests for heat and committer colors."""

import numpy as np

from common.constants import BACKGROUND_COLOR
from render.colors import (
    committer_palette,
    encode_srgb,
    heat_color,
    heat_to_color,
    lch_to_linear_srgb,
)


class TestConversions:
    def test_white_and_black(self):
        white = encode_srgb(lch_to_linear_srgb(np.array([100.0, 0.0, 0.0])))
        black = encode_srgb(lch_to_linear_srgb(np.array([0.0, 0.0, 0.0])))
        assert tuple(black) == (0, 0, 0)
        assert all(channel >= 254 for channel in white)

    def test_out_of_gamut_is_clipped(self):
        assert tuple(encode_srgb(np.array([-0.5, 0.5, 2.0]))) == (0, 187, 255)


class TestHeatColor:
    def test_zero_is_background(self):
        assert heat_color(0) == BACKGROUND_COLOR

    def test_saturates_at_ten(self):
        assert heat_color(10) == heat_color(11) == heat_color(500)

    def test_gradient_runs_blue_to_red_orange(self):
        cold_r, _, cold_b = heat_to_color(0)
        hot_r, _, hot_b = heat_color(10)
        assert cold_b > cold_r
        assert hot_r > hot_b

    def test_colors_change_along_the_gradient(self):
        colors = [heat_color(h) for h in range(1, 11)]
        assert len(set(colors)) == 10


class TestCommitterPalette:
    def test_one_color_per_committer(self):
        palette = committer_palette(5)
        assert palette.shape == (5, 3)
        assert palette.dtype == np.uint8

    def test_deterministic_across_calls(self):
        np.testing.assert_array_equal(committer_palette(8), committer_palette(8))

    def test_prefix_stable_as_committers_grow(self):
        np.testing.assert_array_equal(committer_palette(3), committer_palette(6)[:3])

    def test_empty(self):
        assert committer_palette(0).shape == (0, 3)
