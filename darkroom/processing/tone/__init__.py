"""
Tonal stages: basic adjustments and the band tone curve
"""

from .basic import apply_basic_adjustments
from .curve import apply_tone_curve, build_tone_curve_lut

__all__ = ['apply_basic_adjustments', 'apply_tone_curve', 'build_tone_curve_lut']
