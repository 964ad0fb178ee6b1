"""
Tests for the adjustment pipeline.
"""

import cv2
import numpy as np
import pytest

from darkroom.core.raster import RasterImage
from darkroom.core.result import ErrorKind, ProcessingError
from darkroom.processing.params import AdjustmentParams, ProcessingOptions
from darkroom.processing.pipeline import AdjustmentPipeline, to_working


@pytest.fixture
def pipeline():
    return AdjustmentPipeline()


@pytest.fixture
def random_rgb():
    return np.random.default_rng(7).integers(0, 256, (48, 64, 3), dtype=np.uint8)


class TestPipelineIdentity:
    """Default parameters leave the image untouched."""

    def test_identity(self, pipeline, random_rgb):
        base = RasterImage.from_array(random_rgb)
        result = pipeline.render(base, AdjustmentParams(), ProcessingOptions())
        assert result.is_success
        assert np.array_equal(result.value.to_array(), random_rgb)

    def test_identity_with_resize(self, pipeline):
        base = RasterImage.from_array(np.full((100, 100, 3), 128, dtype=np.uint8))
        result = pipeline.render(base, AdjustmentParams(),
                                 ProcessingOptions(output_width=40, output_height=40))
        image = result.unwrap()
        assert (image.width, image.height) == (40, 40)
        assert abs(image.mean() - 128) <= 1

    def test_resize_needs_both_bounds(self, pipeline, random_rgb):
        base = RasterImage.from_array(random_rgb)
        result = pipeline.render(base, AdjustmentParams(), ProcessingOptions(output_width=10))
        assert result.unwrap().width == 64

    def test_base_is_not_modified(self, pipeline, random_rgb):
        base = RasterImage.from_array(random_rgb)
        pixels = base.pixels
        pipeline.render(base, AdjustmentParams(exposure=1, hue_red=20, rotation=5),
                        ProcessingOptions())
        assert base.pixels == pixels


class TestWorkingLayout:
    """Conversion of base rasters to the working BGR layout."""

    def test_rgb_becomes_bgr(self):
        base = RasterImage.from_array(np.array([[[255, 0, 0]]], dtype=np.uint8))
        assert to_working(base)[0, 0].tolist() == [0, 0, 255]

    def test_grey_expands(self):
        base = RasterImage.from_array(np.full((4, 4), 90, dtype=np.uint8))
        working = to_working(base)
        assert working.shape == (4, 4, 3)
        assert working.min() == working.max() == 90

    def test_alpha_dropped(self):
        base = RasterImage.from_array(np.full((4, 4, 4), 60, dtype=np.uint8))
        assert to_working(base).shape == (4, 4, 3)

    def test_sixteen_bit_scaled(self):
        base = RasterImage.from_array(np.full((4, 4, 3), 128 * 257, dtype=np.uint16))
        working = to_working(base)
        assert working.dtype == np.uint8
        assert working.max() == 128

    def test_sixteen_bit_identity_render(self, pipeline):
        base = RasterImage.from_array(np.full((8, 8, 3), 200 * 257, dtype=np.uint16))
        image = pipeline.render(base, AdjustmentParams(), ProcessingOptions()).unwrap()
        assert image.bit_depth == 8
        assert image.mean() == 200


class TestPipelineStages:
    """Stage composition."""

    def test_stage_order(self):
        names = [name for name, _ in AdjustmentPipeline.STAGES]
        assert names == ["white_balance", "basic", "hsl", "tone_curve",
                         "detail", "lens", "transform"]

    def test_exposure_through_pipeline(self, pipeline):
        base = RasterImage.from_array(np.full((16, 16, 3), 64, dtype=np.uint8))
        image = pipeline.render(base, AdjustmentParams(exposure=1.0), ProcessingOptions()).unwrap()
        assert image.mean() == pytest.approx(128, abs=1)

    def test_crop_through_pipeline(self, pipeline, random_rgb):
        base = RasterImage.from_array(random_rgb)
        params = AdjustmentParams(crop_left=0.5, crop_top=0.5)
        image = pipeline.render(base, params, ProcessingOptions()).unwrap()
        assert (image.width, image.height) == (32, 24)
        assert np.array_equal(image.to_array(), random_rgb[24:, 32:])

    def test_total_over_extreme_values(self, pipeline, random_rgb):
        params = AdjustmentParams(
            exposure=float('inf'), contrast=float('nan'), temperature=-1e9,
            hue_green=1e7, saturation_blue=-1e7, curve_lights=1e6,
            sharpening=1e5, vignetting=-1e5, lens_distortion=1e4,
            rotation=float('-inf'), crop_left=float('nan'), crop_right=-4
        )
        base = RasterImage.from_array(random_rgb[:16, :16])
        result = pipeline.render(base, params, ProcessingOptions())
        assert result.is_success
        assert result.value.is_valid()

    def test_thread_hint(self, pipeline, random_rgb, monkeypatch):
        calls = []
        monkeypatch.setattr(cv2, "setNumThreads", lambda n: calls.append(n))
        pipeline.render(RasterImage.from_array(random_rgb), AdjustmentParams(),
                        ProcessingOptions(thread_hint=3))
        assert calls == [3]


class TestPipelineErrors:
    """Failures come back as tagged errors."""

    def _failing(self, error):
        def stage(image, params):
            raise error
        return (("failing", stage),)

    @pytest.mark.parametrize("error,kind", [
        (cv2.error("primitive failed"), ErrorKind.PRIMITIVES_LIBRARY_ERROR),
        (MemoryError(), ErrorKind.MEMORY_ALLOCATION),
        (ProcessingError(ErrorKind.INVALID_FORMAT, "bad"), ErrorKind.INVALID_FORMAT),
        (RuntimeError("unexpected"), ErrorKind.PROCESSING_FAILED),
    ])
    def test_error_mapping(self, pipeline, random_rgb, monkeypatch, error, kind):
        monkeypatch.setattr(AdjustmentPipeline, "STAGES", self._failing(error))
        result = pipeline.render(RasterImage.from_array(random_rgb), AdjustmentParams(),
                                 ProcessingOptions())
        assert result.is_error
        assert result.kind is kind

    def test_invalid_base(self, pipeline):
        result = pipeline.render(RasterImage(b"\x00", 4, 4, 3), AdjustmentParams(),
                                 ProcessingOptions())
        assert result.kind is ErrorKind.INVALID_PARAMETERS

    def test_none_base(self, pipeline):
        result = pipeline.render(None, AdjustmentParams(), ProcessingOptions())
        assert result.kind is ErrorKind.INVALID_PARAMETERS
