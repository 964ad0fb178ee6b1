"""
Adjustment pipeline for darkroom

Runs the seven stages in their fixed order over a copy of the base raster:
white balance, basic tonal, HSL zones, tone curve, detail, lens, transform.
Later stages assume the earlier stages' 8-bit BGR output, so the order must
not change.
"""

import logging
import time
from typing import Callable, Tuple

import cv2
import numpy as np

from ..core.raster import RasterImage
from ..core.result import ErrorKind, ImageResult, ProcessingError, Result
from .params import AdjustmentParams, ProcessingOptions
from .color.white_balance import apply_white_balance
from .tone.basic import apply_basic_adjustments
from .color.hsl import apply_hsl_adjustments
from .tone.curve import apply_tone_curve
from .detail import apply_detail_adjustments
from .geometry.lens import apply_lens_corrections
from .geometry.transform import apply_transform, resize_to_fit

logger = logging.getLogger(__name__)

Stage = Callable[[np.ndarray, AdjustmentParams], np.ndarray]


def to_working(base: RasterImage) -> np.ndarray:
    """
    Raster (RGB, grey or RGBA; 8 or 16 bit) to an 8-bit BGR array
    """
    array = base.to_array()
    if array.dtype == np.uint16:
        array = np.rint(array.astype(np.float32) / 257.0).astype(np.uint8)

    channels = array.shape[2]
    if channels == 1:
        return cv2.cvtColor(array, cv2.COLOR_GRAY2BGR)
    if channels == 3:
        return cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
    if channels == 4:
        return cv2.cvtColor(array, cv2.COLOR_RGBA2BGR)
    raise ProcessingError(
        ErrorKind.INVALID_FORMAT,
        f"Unsupported channel count: {channels}"
    )


def from_working(image: np.ndarray) -> RasterImage:
    return RasterImage.from_array(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))


class AdjustmentPipeline:
    """
    Composes the adjustment stages into a single render call

    Every stage is a pure ``fn(image, params) -> new image``; the base
    raster handed to ``render`` is never modified.
    """

    STAGES: Tuple[Tuple[str, Stage], ...] = (
        ("white_balance", apply_white_balance),
        ("basic", apply_basic_adjustments),
        ("hsl", apply_hsl_adjustments),
        ("tone_curve", apply_tone_curve),
        ("detail", apply_detail_adjustments),
        ("lens", apply_lens_corrections),
        ("transform", apply_transform),
    )

    def render(self, base: RasterImage, params: AdjustmentParams,
               options: ProcessingOptions) -> ImageResult:
        """
        Apply all adjustments to ``base``

        Args:
            base: Decoded base raster
            params: Adjustment parameters (any float values are accepted)
            options: Output sizing

        Returns:
            Ok(RGB RasterImage) or Err with the failure kind
        """
        try:
            return Result.ok(self._render(base, params, options))
        except ProcessingError as e:
            logger.error(f"Render failed: {e.message}")
            return Result.from_error(e)
        except cv2.error as e:
            logger.error(f"OpenCV error during render: {e}")
            return Result.err(ErrorKind.PRIMITIVES_LIBRARY_ERROR, f"OpenCV error: {e}")
        except MemoryError:
            logger.error("Out of memory during render")
            return Result.err(ErrorKind.MEMORY_ALLOCATION, "Memory allocation failed")
        except Exception as e:
            logger.error(f"Unexpected error during render: {e}")
            return Result.err(ErrorKind.PROCESSING_FAILED, f"Processing failed: {e}")

    def _render(self, base: RasterImage, params: AdjustmentParams,
                options: ProcessingOptions) -> RasterImage:
        if base is None or not base.is_valid():
            raise ProcessingError(ErrorKind.INVALID_PARAMETERS, "Invalid base image")

        params = (params or AdjustmentParams()).sanitized()
        options = (options or ProcessingOptions()).normalized()

        if options.thread_hint > 0:
            # Process-wide setting in OpenCV
            cv2.setNumThreads(options.thread_hint)

        start = time.time()
        image = to_working(base)
        for name, stage in self.STAGES:
            image = stage(image, params)
            logger.debug(f"Stage {name} -> {image.shape[1]}x{image.shape[0]}")

        if options.has_output_bounds():
            image = resize_to_fit(image, options.output_width, options.output_height)

        result = from_working(image)
        logger.debug(f"Rendered {result.width}x{result.height} in {time.time() - start:.3f}s")
        return result
