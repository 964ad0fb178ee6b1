"""
Adjustment stages and the pipeline that composes them
"""

from .params import AdjustmentParams, ProcessingOptions
from .pipeline import AdjustmentPipeline

__all__ = ['AdjustmentParams', 'ProcessingOptions', 'AdjustmentPipeline']
