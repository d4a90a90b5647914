"""WCAG luminance and contrast arithmetic."""
import pytest

from site_compliance.contrast import (
    AA_LARGE_TEXT,
    AA_NORMAL_TEXT,
    contrast_ratio,
    is_large_text,
    meets_ratio,
    parse_rgb,
    relative_luminance,
    required_ratio,
)

WHITE = "rgb(255, 255, 255)"
BLACK = "rgb(0, 0, 0)"


class TestParseRgb:
    def test_rgb_and_rgba(self):
        assert parse_rgb("rgb(51, 102, 153)") == (51.0, 102.0, 153.0)
        assert parse_rgb("rgba(10, 20, 30, 0.5)") == (10.0, 20.0, 30.0)

    def test_channels_clamped(self):
        assert parse_rgb("rgb(300, 0, 0)") == (255.0, 0.0, 0.0)

    @pytest.mark.parametrize("value", [None, "", "transparent", "rgb(1, 2)"])
    def test_unparseable(self, value):
        assert parse_rgb(value) is None


class TestLuminance:
    def test_extremes(self):
        assert relative_luminance(WHITE) == pytest.approx(1.0)
        assert relative_luminance(BLACK) == pytest.approx(0.0)

    def test_unparseable_is_black(self):
        assert relative_luminance("not-a-colour") == 0.0


class TestContrastRatio:
    def test_black_on_white_is_maximum(self):
        assert contrast_ratio(BLACK, WHITE) == pytest.approx(21.0)

    def test_same_colour_is_one(self):
        assert contrast_ratio("rgb(120, 40, 200)", "rgb(120, 40, 200)") == pytest.approx(1.0)

    def test_symmetric(self):
        a, b = "rgb(51, 51, 51)", "rgb(240, 240, 240)"
        assert contrast_ratio(a, b) == pytest.approx(contrast_ratio(b, a))

    def test_ratio_bounds(self):
        ratio = contrast_ratio("rgb(200, 10, 10)", "rgb(10, 200, 10)")
        assert 1.0 <= ratio <= 21.0

    def test_malformed_colour_degrades_to_one(self):
        assert contrast_ratio("garbage", WHITE) == 1.0
        assert contrast_ratio(BLACK, None) == 1.0

    def test_grey_just_below_aa(self):
        ratio = contrast_ratio("rgb(119, 119, 119)", WHITE)
        assert ratio == pytest.approx(4.48, abs=0.01)
        assert not meets_ratio("rgb(119, 119, 119)", WHITE, AA_NORMAL_TEXT)
        assert meets_ratio("rgb(119, 119, 119)", WHITE, AA_LARGE_TEXT)

    def test_grey_just_above_aa(self):
        assert contrast_ratio("rgb(118, 118, 118)", WHITE) == pytest.approx(4.54, abs=0.01)
        assert meets_ratio("rgb(118, 118, 118)", WHITE)


class TestLargeText:
    def test_size_alone(self):
        assert is_large_text("24px")
        assert not is_large_text("16px")

    def test_bold_threshold(self):
        assert is_large_text("19px", "700")
        assert is_large_text("19px", "bold")
        assert not is_large_text("19px", "400")
        assert not is_large_text("16px", "700")

    def test_required_ratio(self):
        assert required_ratio("16px", "400") == AA_NORMAL_TEXT
        assert required_ratio("32px", "400") == AA_LARGE_TEXT
        assert required_ratio("32px", None, normal=7.0, large=4.5) == 4.5
