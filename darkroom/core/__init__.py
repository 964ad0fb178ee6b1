"""
Core value types for darkroom: rasters, error taxonomy and tagged results.
"""

from .raster import RasterImage
from .result import (
    ErrorKind, ProcessingError, Result,
    ImageResult, MetadataResult, BoolResult, StringResult
)

__all__ = [
    "RasterImage",
    "ErrorKind",
    "ProcessingError",
    "Result",
    "ImageResult",
    "MetadataResult",
    "BoolResult",
    "StringResult",
]
