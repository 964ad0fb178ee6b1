"""
Tests for white balance, the color zone table and HSL grading.
"""

import cv2
import numpy as np
import pytest

from darkroom.processing.params import AdjustmentParams
from darkroom.processing.color.white_balance import (
    apply_white_balance, calculate_white_balance_matrix, estimate_color_temperature
)
from darkroom.processing.color.zones import (
    ZONE_TABLE, ColorZone, build_color_zones, hue_mask
)
from darkroom.processing.color.hsl import apply_hsl_adjustments

from conftest import solid_bgr


def hue_degrees(bgr_pixel):
    """Hue of one 8-bit BGR pixel in degrees"""
    pixel = np.array([[bgr_pixel]], dtype=np.float32) / 255.0
    return float(cv2.cvtColor(pixel, cv2.COLOR_BGR2HSV)[0, 0, 0])


class TestWhiteBalance:
    """Test the temperature/tint model."""

    def test_neutral_matrix(self):
        assert np.allclose(calculate_white_balance_matrix(0, 0), np.eye(3))

    def test_warm_matrix(self):
        r, g, b = np.diag(calculate_white_balance_matrix(1000, 0))
        assert r == pytest.approx(1.3)
        assert g == pytest.approx(1.0)
        assert b == pytest.approx(0.8)

    def test_cool_matrix(self):
        r, g, b = np.diag(calculate_white_balance_matrix(-1000, 0))
        assert r == pytest.approx(0.8)
        assert b == pytest.approx(1.3)

    def test_tint(self):
        r, g, b = np.diag(calculate_white_balance_matrix(0, 100))
        assert g == pytest.approx(0.95)
        assert r == pytest.approx(1.1)
        assert b == pytest.approx(1.1)

        r, g, b = np.diag(calculate_white_balance_matrix(0, -100))
        assert g == pytest.approx(1.1)

    def test_identity_fast_path_copies(self):
        image = solid_bgr(10, 20, 30)
        result = apply_white_balance(image, AdjustmentParams())
        assert np.array_equal(result, image)
        assert result is not image

    def test_warming_shifts_red_over_blue(self):
        image = solid_bgr(128, 128, 128)
        result = apply_white_balance(image, AdjustmentParams(temperature=1000))
        b, g, r = result[0, 0]
        assert r > g > b
        # Input untouched
        assert image[0, 0, 0] == 128

    def test_clamps(self):
        image = solid_bgr(250, 250, 250)
        result = apply_white_balance(image, AdjustmentParams(temperature=100000))
        assert result.dtype == np.uint8
        assert result[0, 0, 2] == 255
        assert result[0, 0, 0] == 0

    def test_color_temperature_estimate(self):
        assert estimate_color_temperature((2.0, 1.0, 1.5, 1.0)) == pytest.approx(4875.0)
        assert estimate_color_temperature((0.0, 1.0, 1.5)) == 0.0
        assert estimate_color_temperature(()) == 0.0


class TestColorZones:
    """Test the static hue sector table."""

    def test_table_layout(self):
        assert len(ZONE_TABLE) == 9
        assert [z[0] for z in ZONE_TABLE][:8] == [
            "red", "orange", "yellow", "green", "aqua", "blue", "purple", "magenta"
        ]
        assert ZONE_TABLE[-1] == ("red", 345.0, 360.0)

    def test_build_attaches_deltas(self):
        zones = build_color_zones(AdjustmentParams(hue_red=12, saturation_blue=-5))
        reds = [z for z in zones if z.name == "red"]
        assert len(reds) == 2
        assert all(z.hue_delta == 12 for z in reds)
        blue = next(z for z in zones if z.name == "blue")
        assert blue.sat_delta == -5
        assert not blue.is_neutral
        assert next(z for z in zones if z.name == "green").is_neutral

    def test_half_open_masks(self):
        hue = np.array([0.0, 7.4, 7.5, 172.4, 172.5, 179.9], dtype=np.float32)
        red = ColorZone("red", 0.0, 15.0)
        wrap = ColorZone("red", 345.0, 360.0)
        assert wrap.wraps and not red.wraps
        assert hue_mask(hue, red).tolist() == [1, 1, 0, 0, 0, 0]
        assert hue_mask(hue, wrap).tolist() == [0, 0, 0, 0, 1, 1]

    def test_sector_running_past_full_circle(self):
        zone = ColorZone("red", 345.0, 375.0)
        hue = np.array([171.0, 175.0, 3.0, 7.4, 8.0], dtype=np.float32)
        assert hue_mask(hue, zone).tolist() == [0, 1, 1, 1, 0]


class TestHSLAdjustments:
    """Test per-zone hue/saturation/luminance grading."""

    # Pure red sits at 0 degrees; this one sits near 350 degrees
    PURE_RED = (0, 0, 255)
    WRAPPED_RED = (43, 0, 255)

    def test_identity_fast_path(self):
        image = solid_bgr(40, 90, 200)
        result = apply_hsl_adjustments(image, AdjustmentParams())
        assert np.array_equal(result, image)
        assert result is not image

    def test_wrapped_red_is_in_red_zone(self):
        assert 345.0 <= hue_degrees(self.WRAPPED_RED) < 360.0
        assert hue_degrees(self.PURE_RED) < 15.0

    @pytest.mark.parametrize("color", [PURE_RED, WRAPPED_RED])
    def test_luminance_red_applied_once(self, color):
        image = solid_bgr(*color)
        result = apply_hsl_adjustments(image, AdjustmentParams(luminance_red=-50))
        # Value halves exactly once, never twice
        assert abs(int(result[0, 0].max()) - 128) <= 1

    def test_greys_follow_red_luminance(self):
        grey = solid_bgr(128, 128, 128)
        result = apply_hsl_adjustments(grey, AdjustmentParams(luminance_red=50))
        assert np.array_equal(result[0, 0], [192, 192, 192])

        unchanged = apply_hsl_adjustments(grey, AdjustmentParams(luminance_blue=50))
        assert np.array_equal(unchanged, grey)

    def test_hue_shift_leaves_greys_neutral(self):
        grey = solid_bgr(90, 90, 90)
        result = apply_hsl_adjustments(grey, AdjustmentParams(hue_red=40))
        assert np.array_equal(result, grey)

    def test_hue_shift_identical_across_seam(self):
        params = AdjustmentParams(hue_red=30)
        shifts = []
        for color in (self.PURE_RED, self.WRAPPED_RED):
            before = hue_degrees(color)
            after = hue_degrees(apply_hsl_adjustments(solid_bgr(*color), params)[0, 0])
            shifts.append((after - before) % 360.0)
        assert shifts[0] == pytest.approx(30.0, abs=2.0)
        assert shifts[1] == pytest.approx(30.0, abs=2.0)

    @pytest.mark.parametrize("color", [PURE_RED, WRAPPED_RED])
    def test_desaturate_red(self, color):
        result = apply_hsl_adjustments(solid_bgr(*color), AdjustmentParams(saturation_red=-100))
        b, g, r = result[0, 0].astype(int)
        assert max(b, g, r) - min(b, g, r) <= 1

    def test_zones_do_not_cascade(self):
        # Red shifted into orange must not then receive the orange shift
        params = AdjustmentParams(hue_red=30, hue_orange=30)
        result = apply_hsl_adjustments(solid_bgr(*self.PURE_RED), params)
        assert hue_degrees(result[0, 0]) == pytest.approx(30.0, abs=2.0)

    def test_other_zones_untouched(self):
        blue = solid_bgr(255, 0, 0)
        result = apply_hsl_adjustments(blue, AdjustmentParams(hue_red=40, saturation_red=-100))
        assert np.array_equal(result, blue)

    def test_input_not_mutated(self):
        image = solid_bgr(*self.PURE_RED)
        before = image.copy()
        apply_hsl_adjustments(image, AdjustmentParams(hue_red=20, luminance_red=30))
        assert np.array_equal(image, before)
