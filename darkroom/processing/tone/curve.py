"""
Tone curve stage

Four equal-width bands (shadows, darks, lights, highlights) each bend the
curve with a parabolic bump that is zero at the band edges, so the curve
stays continuous however the band sliders are set.
"""

import numpy as np
import cv2
import logging

from ..params import AdjustmentParams, CURVE_FIELDS

logger = logging.getLogger(__name__)

LUT_SIZE = 256
BAND_WIDTH = 0.25


def build_tone_curve_lut(params: AdjustmentParams) -> np.ndarray:
    """
    Build the 256-entry lookup table for the current curve bands

    Args:
        params: Adjustment parameters (only the curve_* fields are read)

    Returns:
        uint8 array of shape (256,)
    """
    band_deltas = [getattr(params, name) for name in CURVE_FIELDS]

    t = np.arange(LUT_SIZE, dtype=np.float64) / (LUT_SIZE - 1)
    band = np.minimum((t / BAND_WIDTH).astype(np.int64), len(band_deltas) - 1)
    u = (t - band * BAND_WIDTH) / BAND_WIDTH
    deltas = np.asarray(band_deltas, dtype=np.float64)[band]

    curve = t + deltas / 100.0 * u * (1.0 - u)
    return np.rint(np.clip(curve, 0.0, 1.0) * 255.0).astype(np.uint8)


def apply_tone_curve(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """Apply the band tone curve to an 8-bit BGR image"""
    if not params.has_curve_adjustments():
        return image.copy()

    lut = build_tone_curve_lut(params)
    logger.debug(f"Tone curve bands: "
                 f"{', '.join(f'{name}={getattr(params, name):g}' for name in CURVE_FIELDS)}")
    return cv2.LUT(image, lut)
