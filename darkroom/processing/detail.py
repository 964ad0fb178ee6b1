"""
Detail stage: sharpening and noise reduction
"""

import numpy as np
import cv2
import logging

from .imaging import to_float, to_uint8
from .params import AdjustmentParams

logger = logging.getLogger(__name__)

SHARPEN_SIGMA = 1.0

# fastNlMeans window sizes
TEMPLATE_WINDOW = 7
SEARCH_WINDOW = 21

LUMA_DENOISE_SCALE = 0.3
CHROMA_DENOISE_SCALE = 0.2


def apply_detail_adjustments(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """
    Sharpen and denoise an 8-bit BGR image

    Sharpening is an unsharp mask; luminance noise uses non-local means on
    the whole image; color noise only smooths the a/b channels of Lab.
    """
    if not params.has_detail_adjustments():
        return image.copy()

    result = image.copy()

    if params.sharpening != 0:
        result = _sharpen(result, params.sharpening)

    strength = LUMA_DENOISE_SCALE * params.noise_reduction
    if strength > 0:
        logger.debug(f"Luminance noise reduction h={strength:.2f}")
        result = cv2.fastNlMeansDenoisingColored(
            result, None, strength, strength, TEMPLATE_WINDOW, SEARCH_WINDOW
        )

    strength = CHROMA_DENOISE_SCALE * params.color_noise_reduction
    if strength > 0:
        logger.debug(f"Color noise reduction h={strength:.2f}")
        result = _reduce_color_noise(result, strength)

    return result


def _sharpen(image: np.ndarray, amount: float) -> np.ndarray:
    img = to_float(image)
    blurred = cv2.GaussianBlur(img, (0, 0), sigmaX=SHARPEN_SIGMA)
    return to_uint8(img + (img - blurred) * (amount / 100.0))


def _reduce_color_noise(image: np.ndarray, strength: float) -> np.ndarray:
    """Denoise chroma only, leaving L untouched"""
    lab = cv2.cvtColor(image, cv2.COLOR_BGR2LAB)
    lightness, a, b = cv2.split(lab)
    a = cv2.fastNlMeansDenoising(a, None, strength, TEMPLATE_WINDOW, SEARCH_WINDOW)
    b = cv2.fastNlMeansDenoising(b, None, strength, TEMPLATE_WINDOW, SEARCH_WINDOW)
    return cv2.cvtColor(cv2.merge([lightness, a, b]), cv2.COLOR_LAB2BGR)
