"""
Color stages: white balance and HSL zone grading
"""

from .white_balance import apply_white_balance, calculate_white_balance_matrix
from .hsl import apply_hsl_adjustments
from .zones import ColorZone, build_color_zones

__all__ = [
    'apply_white_balance', 'calculate_white_balance_matrix',
    'apply_hsl_adjustments', 'ColorZone', 'build_color_zones'
]
