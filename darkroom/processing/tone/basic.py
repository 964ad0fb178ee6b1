"""
Basic tonal adjustments for darkroom

Exposure, highlights/shadows, whites/blacks, contrast, brightness,
saturation/vibrance and clarity, applied in that order in normalised float
space and converted back to 8-bit at the end.
"""

import numpy as np
import cv2
import logging

from ..imaging import to_float, to_uint8, luminance, blend
from ..params import AdjustmentParams

logger = logging.getLogger(__name__)

# Exposure beyond this many stops saturates every non-black pixel
EXPOSURE_LIMIT = 16.0

HIGHLIGHT_THRESHOLD = 0.7
SHADOW_THRESHOLD = 0.3
WHITES_THRESHOLD = 0.8
BLACKS_THRESHOLD = 0.2
MASK_FEATHER_KERNEL = (21, 21)
CLARITY_SIGMA = 10.0


def apply_basic_adjustments(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """
    Apply the basic tonal adjustments to an 8-bit BGR image

    Args:
        image: 8-bit BGR image
        params: Adjustment parameters

    Returns:
        New 8-bit BGR image
    """
    if not params.has_basic_adjustments():
        return image.copy()

    result = to_float(image)

    if params.exposure != 0:
        result = _adjust_exposure(result, params.exposure)

    if params.highlights != 0 or params.shadows != 0:
        result = _adjust_highlights_shadows(result, params.highlights, params.shadows)

    if params.whites != 0 or params.blacks != 0:
        result = _adjust_whites_blacks(result, params.whites, params.blacks)

    if params.contrast != 0:
        result = _adjust_contrast(result, params.contrast)

    if params.brightness != 0:
        result = result + params.brightness / 100.0

    if params.saturation != 0 or params.vibrance != 0:
        result = _adjust_saturation_vibrance(result, params.saturation, params.vibrance)

    if params.clarity != 0:
        result = _adjust_clarity(result, params.clarity)

    return to_uint8(result)


def _adjust_exposure(img: np.ndarray, stops: float) -> np.ndarray:
    stops = min(max(stops, -EXPOSURE_LIMIT), EXPOSURE_LIMIT)
    return img * np.float32(2.0 ** stops)


def _feathered_mask(binary: np.ndarray) -> np.ndarray:
    """Blur a 0/1 mask into smooth blend weights"""
    return cv2.GaussianBlur(binary.astype(np.float32), MASK_FEATHER_KERNEL, 0)


def _adjust_highlights_shadows(img: np.ndarray, highlights: float,
                               shadows: float) -> np.ndarray:
    """Scale bright / dark regions selected by feathered luminance masks"""
    luma = luminance(img)

    if highlights != 0:
        mask = _feathered_mask(luma > HIGHLIGHT_THRESHOLD)
        img = blend(img, img * (1.0 + highlights / 100.0), mask)

    if shadows != 0:
        mask = _feathered_mask(luma <= SHADOW_THRESHOLD)
        img = blend(img, img * (1.0 + shadows / 100.0), mask)

    return img


def _adjust_whites_blacks(img: np.ndarray, whites: float, blacks: float) -> np.ndarray:
    """Scale the extreme tones selected by hard luminance thresholds"""
    luma = luminance(img)

    if whites != 0:
        mask = (luma > WHITES_THRESHOLD).astype(np.float32)
        img = blend(img, img * (1.0 + whites / 100.0), mask)

    if blacks != 0:
        mask = (luma < BLACKS_THRESHOLD).astype(np.float32)
        img = blend(img, img * (1.0 + blacks / 100.0), mask)

    return img


def _adjust_contrast(img: np.ndarray, amount: float) -> np.ndarray:
    factor = 1.0 + amount / 100.0
    return (img - 0.5) * factor + 0.5


def _adjust_saturation_vibrance(img: np.ndarray, saturation: float,
                                vibrance: float) -> np.ndarray:
    """
    Saturation scales every pixel's S channel; vibrance only touches
    pixels whose saturation is below 0.5
    """
    hsv = cv2.cvtColor(np.maximum(img, 0.0).astype(np.float32), cv2.COLOR_BGR2HSV)
    sat = hsv[:, :, 1]

    if saturation != 0:
        sat = sat * (1.0 + saturation / 100.0)

    if vibrance != 0:
        muted = (sat < 0.5).astype(np.float32)
        sat = blend(sat, sat * (1.0 + vibrance / 100.0), muted)

    hsv[:, :, 1] = np.clip(sat, 0.0, 1.0)
    return cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)


def _adjust_clarity(img: np.ndarray, amount: float) -> np.ndarray:
    """Local contrast via a wide unsharp mask"""
    blurred = cv2.GaussianBlur(img, (0, 0), sigmaX=CLARITY_SIGMA)
    return img + (img - blurred) * (amount / 100.0)
