"""
HSL zone grading for darkroom

Shifts hue and scales saturation / value separately for each color zone,
using feathered hue masks so neighbouring colors blend smoothly.
"""

import numpy as np
import cv2
import logging

from ..imaging import to_float, to_uint8, blend
from ..params import AdjustmentParams
from .zones import build_color_zones, hue_mask

logger = logging.getLogger(__name__)

ZONE_FEATHER_KERNEL = (5, 5)
ZONE_FEATHER_SIGMA = 2.0

# Hue is stored at half scale: 0-180 instead of 0-360 degrees
HUE_RANGE = 180.0


def apply_hsl_adjustments(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """
    Apply per-zone hue/saturation/luminance deltas to an 8-bit BGR image

    Masks are computed from the unmodified hue, so shifting one zone never
    pushes pixels into another zone's adjustment.
    """
    if not params.has_hsl_adjustments():
        return image.copy()

    hsv = cv2.cvtColor(to_float(image), cv2.COLOR_BGR2HSV)
    source_hue = hsv[:, :, 0] / 2.0
    hue = source_hue.copy()
    saturation = hsv[:, :, 1].copy()
    value = hsv[:, :, 2].copy()

    for zone in build_color_zones(params):
        if zone.is_neutral:
            continue

        mask = cv2.GaussianBlur(hue_mask(source_hue, zone), ZONE_FEATHER_KERNEL,
                                ZONE_FEATHER_SIGMA)
        logger.debug(f"HSL zone {zone.name} [{zone.min_hue:.0f}, {zone.max_hue:.0f}) "
                     f"covers {float(mask.mean()) * 100:.1f}% of the image")

        if zone.hue_delta != 0:
            hue = blend(hue, hue + zone.hue_delta / 2.0, mask)

        if zone.sat_delta != 0:
            saturation = blend(saturation, saturation * (1.0 + zone.sat_delta / 100.0), mask)

        if zone.lum_delta != 0:
            value = blend(value, value * (1.0 + zone.lum_delta / 100.0), mask)

    hsv[:, :, 0] = np.mod(hue, HUE_RANGE) * 2.0
    hsv[:, :, 1] = np.clip(saturation, 0.0, 1.0)
    hsv[:, :, 2] = np.clip(value, 0.0, 1.0)

    return to_uint8(cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR))
