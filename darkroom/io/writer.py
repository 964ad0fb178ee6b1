"""
Image file writer
"""

import logging
from pathlib import Path
from typing import Union

import cv2

from ..core.raster import RasterImage
from ..core.result import BoolResult, ErrorKind, ProcessingError, Result

logger = logging.getLogger(__name__)

ENCODER_EXTENSIONS = {
    "JPEG": ".jpg",
    "JPG": ".jpg",
    "PNG": ".png",
    "TIFF": ".tiff",
    "TIF": ".tiff",
}
SAVE_FORMATS = tuple(ENCODER_EXTENSIONS)

PNG_COMPRESSION = 9
TIFF_COMPRESSION_LZW = 5


def encoder_params(fmt: str, quality: int) -> list:
    fmt = fmt.upper()
    if fmt in ("JPEG", "JPG"):
        return [cv2.IMWRITE_JPEG_QUALITY, min(max(int(quality), 1), 100)]
    if fmt == "PNG":
        return [cv2.IMWRITE_PNG_COMPRESSION, PNG_COMPRESSION]
    if fmt in ("TIFF", "TIF"):
        return [cv2.IMWRITE_TIFF_COMPRESSION, TIFF_COMPRESSION_LZW]
    raise ProcessingError(ErrorKind.INVALID_PARAMETERS, f"Unsupported output format: {fmt}")


def save_image(image: RasterImage, path: Union[str, Path], fmt: str = "JPEG",
               quality: int = 95) -> BoolResult:
    """
    Encode an RGB raster to ``path``

    Args:
        image: Raster to write
        path: Output file; missing parent directories are created
        fmt: JPEG, PNG or TIFF
        quality: JPEG quality 1-100 (ignored for other formats)

    Returns:
        Ok(True) or Err
    """
    if image is None or not image.is_valid():
        return Result.err(ErrorKind.INVALID_PARAMETERS, "Invalid image data")
    if not fmt or fmt.upper() not in SAVE_FORMATS:
        return Result.err(ErrorKind.INVALID_PARAMETERS, f"Unsupported output format: {fmt}")

    path = Path(path)
    try:
        params = encoder_params(fmt, quality)
        array = image.to_array()
        if array.shape[2] == 3:
            array = cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
        elif array.shape[2] == 4:
            array = cv2.cvtColor(array, cv2.COLOR_RGBA2BGRA)

        # Encode by format rather than by file extension
        ok, encoded = cv2.imencode(ENCODER_EXTENSIONS[fmt.upper()], array, params)
        if not ok:
            logger.error(f"Encoder failed for {path}")
            return Result.err(ErrorKind.PROCESSING_FAILED, f"Failed to encode image: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encoded.tobytes())
    except ProcessingError as e:
        return Result.from_error(e)
    except cv2.error as e:
        logger.error(f"OpenCV error while saving {path}: {e}")
        return Result.err(ErrorKind.PRIMITIVES_LIBRARY_ERROR, f"OpenCV error: {e}")
    except OSError as e:
        logger.error(f"Could not write {path}: {e}")
        return Result.err(ErrorKind.PROCESSING_FAILED, f"Failed to save image: {e}")

    logger.info(f"Saved {image.width}x{image.height} {fmt.upper()} to {path}")
    return Result.ok(True)
