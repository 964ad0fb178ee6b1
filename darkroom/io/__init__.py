"""
Decode, metadata and file output
"""

from .decoder import (
    RawDecoder, RawpyDecoder, RawFields, EmbeddedThumbnail,
    SUPPORTED_INPUT_FORMATS, is_supported_format
)
from .metadata import RawMetadata, format_shutter_speed, metadata_from_fields
from .writer import save_image, SAVE_FORMATS

__all__ = [
    'RawDecoder', 'RawpyDecoder', 'RawFields', 'EmbeddedThumbnail',
    'SUPPORTED_INPUT_FORMATS', 'is_supported_format',
    'RawMetadata', 'format_shutter_speed', 'metadata_from_fields',
    'save_image', 'SAVE_FORMATS'
]
