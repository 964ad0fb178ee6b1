"""
darkroom: non-destructive RAW adjustment engine

Applies an ordered pipeline of tonal, color, detail, lens and geometric
corrections to decoded RAW rasters without touching the source pixels.
Sessions cache the decoded base image so repeated preview renders stay cheap.
"""

__version__ = "1.0.0"
__author__ = "Sam"

from .config import load_config
from .core.raster import RasterImage
from .core.result import ErrorKind, ProcessingError, Result
from .processing.params import AdjustmentParams, ProcessingOptions
from .api import RawEditor

__all__ = [
    "load_config",
    "RasterImage",
    "ErrorKind",
    "ProcessingError",
    "Result",
    "AdjustmentParams",
    "ProcessingOptions",
    "RawEditor",
]
