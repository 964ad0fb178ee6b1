"""
Lens corrections and geometric transforms
"""

from .lens import apply_lens_corrections
from .transform import apply_transform, compute_crop_rect, resize_to_fit, rotate

__all__ = [
    'apply_lens_corrections', 'apply_transform', 'compute_crop_rect',
    'resize_to_fit', 'rotate'
]
