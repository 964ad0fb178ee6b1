"""
Geometric transform stage and output sizing

Rotation keeps the input dimensions; corners uncovered by the rotation are
filled with black. Cropping is given as a normalised rectangle and is
clamped so the result is always at least 1x1 and inside the image.
"""

import cv2
import numpy as np
import logging
from typing import Tuple

from ..params import AdjustmentParams

logger = logging.getLogger(__name__)

ROTATION_BORDER_VALUE = (0, 0, 0)


def apply_transform(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """Rotate then crop an 8-bit BGR image"""
    result = image

    if params.rotation != 0:
        result = rotate(result, params.rotation)

    if params.has_crop():
        result = crop(result, params)

    if result is image:
        return image.copy()
    return result


def rotate(image: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotate counter-clockwise about the image center

    Output has the same size as the input; bilinear sampling, constant
    black border.
    """
    height, width = image.shape[:2]
    center = (width / 2.0, height / 2.0)
    matrix = cv2.getRotationMatrix2D(center, float(angle), 1.0)
    return cv2.warpAffine(
        image, matrix, (width, height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=ROTATION_BORDER_VALUE
    )


def _clamp(value, low, high):
    return min(max(value, low), high)


def compute_crop_rect(width: int, height: int,
                      params: AdjustmentParams) -> Tuple[int, int, int, int]:
    """
    Pixel rectangle for the normalised crop in ``params``

    Returns:
        (x, y, crop_width, crop_height), always inside the image and at
        least 1x1
    """
    left = _clamp(params.crop_left, 0.0, 1.0)
    top = _clamp(params.crop_top, 0.0, 1.0)
    right = _clamp(params.crop_right, 0.0, 1.0)
    bottom = _clamp(params.crop_bottom, 0.0, 1.0)

    crop_width = _clamp(int(round((right - left) * width)), 1, width)
    crop_height = _clamp(int(round((bottom - top) * height)), 1, height)
    x = _clamp(int(round(left * width)), 0, width - crop_width)
    y = _clamp(int(round(top * height)), 0, height - crop_height)
    return x, y, crop_width, crop_height


def crop(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    height, width = image.shape[:2]
    x, y, crop_width, crop_height = compute_crop_rect(width, height, params)
    logger.debug(f"Crop {width}x{height} -> {crop_width}x{crop_height} at ({x}, {y})")
    return image[y:y + crop_height, x:x + crop_width].copy()


def fit_scale(width: int, height: int, max_width: int, max_height: int) -> float:
    """
    Scale factor that fits ``width x height`` inside the bounds

    A bound of 0 leaves that axis unconstrained. Never above 1.0.
    """
    scale = 1.0
    if max_width > 0:
        scale = min(scale, max_width / width)
    if max_height > 0:
        scale = min(scale, max_height / height)
    return scale


def resize_to_fit(image: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
    """Downscale preserving aspect ratio; returns a copy when already small enough"""
    height, width = image.shape[:2]
    scale = fit_scale(width, height, max_width, max_height)
    if scale >= 1.0:
        return image.copy()

    new_width = max(1, int(round(width * scale)))
    new_height = max(1, int(round(height * scale)))
    return cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_AREA)
