"""
White balance stage for darkroom

A heuristic temperature/tint model rather than a CIE-accurate one: warming
raises the red gain and lowers blue, tint trades green against magenta.
"""

import numpy as np
from typing import Sequence
import logging

from ..imaging import to_float, to_uint8
from ..params import AdjustmentParams

logger = logging.getLogger(__name__)

# Reference used to turn camera WB coefficients into a rough Kelvin value
DAYLIGHT_KELVIN = 6500.0


def calculate_white_balance_matrix(temperature: float, tint: float) -> np.ndarray:
    """
    Build the diagonal gain matrix for a temperature/tint pair
    
    Args:
        temperature: Warm (positive) / cool (negative) shift
        tint: Magenta (positive) / green (negative) shift
        
    Returns:
        3x3 float32 matrix with R, G, B gains on the diagonal
    """
    temp_factor = temperature / 1000.0
    tint_factor = tint / 100.0
    
    r_gain = 1.0
    g_gain = 1.0
    b_gain = 1.0
    
    if temp_factor > 0:
        # Warmer
        r_gain = 1.0 + temp_factor * 0.3
        b_gain = 1.0 - temp_factor * 0.2
    else:
        # Cooler
        r_gain = 1.0 + temp_factor * 0.2
        b_gain = 1.0 - temp_factor * 0.3
    
    if tint_factor > 0:
        # Magenta
        r_gain += tint_factor * 0.1
        b_gain += tint_factor * 0.1
        g_gain -= tint_factor * 0.05
    else:
        # Green
        g_gain -= tint_factor * 0.1
    
    return np.diag([r_gain, g_gain, b_gain]).astype(np.float32)


def apply_white_balance(image: np.ndarray, params: AdjustmentParams) -> np.ndarray:
    """
    Apply temperature/tint gains to an 8-bit BGR image
    
    Skipped entirely when both temperature and tint are zero.
    """
    if not params.has_white_balance():
        return image.copy()
    
    matrix = calculate_white_balance_matrix(params.temperature, params.tint)
    r_gain, g_gain, b_gain = np.diag(matrix)
    logger.debug(f"White balance gains R={r_gain:.3f} G={g_gain:.3f} B={b_gain:.3f}")
    
    result = to_float(image)
    result *= np.array([b_gain, g_gain, r_gain], dtype=np.float32)
    return to_uint8(result)


def estimate_color_temperature(wb_coeffs: Sequence[float]) -> float:
    """
    Rough scene color temperature from camera white balance coefficients
    
    Args:
        wb_coeffs: Camera multipliers in R, G, B(, G2) order
        
    Returns:
        Kelvin estimate, or 0.0 when the coefficients are unusable
    """
    if wb_coeffs is None or len(wb_coeffs) < 3:
        return 0.0
    red, blue = float(wb_coeffs[0]), float(wb_coeffs[2])
    if red <= 0:
        return 0.0
    return DAYLIGHT_KELVIN / red * blue
