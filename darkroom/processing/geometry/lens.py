"""
Lens corrections: vignetting and radial distortion
"""

import numpy as np
import cv2
import logging

from ..params import AdjustmentParams

logger = logging.getLogger(__name__)

# lens_distortion slider units per k1 coefficient
DISTORTION_SCALE = 1000.0


def apply_lens_corrections(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """Apply vignette compensation then undistort an 8-bit BGR image"""
    if not params.has_lens_corrections():
        return image.copy()

    result = image.copy()

    if params.vignetting != 0:
        result = _correct_vignetting(result, params.vignetting)

    if params.lens_distortion != 0:
        result = _correct_distortion(result, params.lens_distortion)

    return result


def vignette_multiplier(height: int, width: int, amount: float) -> np.ndarray:
    """
    Radial gain map: ``1 + amount/100 * (1 - dist/max_dist)``

    The center gets the full gain and the corners are left at 1.0.
    """
    cy, cx = height / 2.0, width / 2.0
    y, x = np.ogrid[:height, :width]
    dist = np.sqrt((x - cx) ** 2 + (y - cy) ** 2)
    max_dist = np.sqrt(cx ** 2 + cy ** 2)
    if max_dist == 0:
        max_dist = 1.0
    return (1.0 + amount / 100.0 * (1.0 - dist / max_dist)).astype(np.float32)


def _correct_vignetting(image: np.ndarray, amount: float) -> np.ndarray:
    height, width = image.shape[:2]
    gain = vignette_multiplier(height, width, amount)
    result = image.astype(np.float32) * gain[:, :, np.newaxis]
    return np.rint(np.clip(result, 0, 255)).astype(np.uint8)


def camera_matrix(width: int, height: int) -> np.ndarray:
    """Unit-aspect pinhole matrix with focal length equal to the image width"""
    focal = float(width)
    return np.array([
        [focal, 0.0, width / 2.0],
        [0.0, focal, height / 2.0],
        [0.0, 0.0, 1.0]
    ], dtype=np.float64)


def _correct_distortion(image: np.ndarray, amount: float) -> np.ndarray:
    height, width = image.shape[:2]
    k1 = amount / DISTORTION_SCALE
    dist_coeffs = np.array([k1, 0.0, 0.0, 0.0], dtype=np.float64)
    logger.debug(f"Undistort with k1={k1:.4f}")
    return cv2.undistort(image, camera_matrix(width, height), dist_coeffs)
