"""
RAW decode service for darkroom

``RawDecoder`` is the narrow contract the session layer talks to; the
``RawpyDecoder`` realisation wraps LibRaw through rawpy and reads shooting
metadata with exifread. LibRaw failures are translated into
``ProcessingError`` at this seam.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import exifread
import numpy as np
import rawpy

from ..core.result import ErrorKind, ProcessingError

logger = logging.getLogger(__name__)

SUPPORTED_INPUT_FORMATS: Tuple[str, ...] = (
    "CR2", "NEF", "ARW", "DNG", "RAF", "RW2", "ORF", "PEF", "SRW",
    "3FR", "FFF", "IIQ", "MOS", "CRW", "ERF", "MEF", "MRW", "X3F",
)

# LibRaw exception class name -> (error kind, message)
LIBRAW_ERROR_MESSAGES = {
    "LibRawUnspecifiedError": (ErrorKind.DECODE_LIBRARY_ERROR, "Unspecified error"),
    "LibRawFileUnsupportedError": (ErrorKind.INVALID_FORMAT, "Unsupported file format"),
    "LibRawRequestForNonexistentImageError": (ErrorKind.DECODE_LIBRARY_ERROR,
                                              "Request for nonexistent image"),
    "LibRawOutOfOrderCallError": (ErrorKind.DECODE_LIBRARY_ERROR, "Out of order call"),
    "LibRawNoThumbnailError": (ErrorKind.DECODE_LIBRARY_ERROR, "No thumbnail found"),
    "LibRawUnsupportedThumbnailError": (ErrorKind.DECODE_LIBRARY_ERROR,
                                        "Unsupported thumbnail format"),
    "LibRawCancelledByCallbackError": (ErrorKind.DECODE_LIBRARY_ERROR, "Cancelled by callback"),
    "LibRawBadCropError": (ErrorKind.DECODE_LIBRARY_ERROR, "Bad crop"),
    "LibRawTooBigError": (ErrorKind.DECODE_LIBRARY_ERROR, "Image too big"),
    "LibRawMemPoolOverflowError": (ErrorKind.DECODE_LIBRARY_ERROR, "Memory pool overflow"),
    "LibRawInsufficientMemoryError": (ErrorKind.MEMORY_ALLOCATION, "Insufficient memory"),
    "LibRawUnsufficientMemoryError": (ErrorKind.MEMORY_ALLOCATION, "Insufficient memory"),
    "LibRawNotImplementedError": (ErrorKind.DECODE_LIBRARY_ERROR, "Not implemented"),
    "LibRawInputClosedError": (ErrorKind.DECODE_LIBRARY_ERROR, "Input closed"),
    "LibRawDataError": (ErrorKind.DECODE_LIBRARY_ERROR, "Corrupted data"),
    "LibRawIOError": (ErrorKind.DECODE_LIBRARY_ERROR, "Input/output error"),
}


def is_supported_format(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lstrip(".").upper() in SUPPORTED_INPUT_FORMATS


def translate_libraw_error(error: Exception, context: str) -> ProcessingError:
    """Map a rawpy/LibRaw exception onto the darkroom error taxonomy"""
    name = type(error).__name__
    kind, message = LIBRAW_ERROR_MESSAGES.get(
        name, (ErrorKind.DECODE_LIBRARY_ERROR, f"Unknown error ({error})")
    )
    return ProcessingError(kind, f"{context}: {message}")


@contextmanager
def libraw_errors(context: str):
    """Re-raise LibRaw exceptions raised inside the block as ProcessingError"""
    try:
        yield
    except rawpy.LibRawError as e:
        error = translate_libraw_error(e, context)
        logger.error(error.message)
        raise error from e


@dataclass
class EmbeddedThumbnail:
    """Preview stored inside the RAW container"""
    format: str  # "jpeg" or "bitmap"
    data: Union[bytes, np.ndarray]

    def to_rgb(self) -> Optional[np.ndarray]:
        """Decode to an 8-bit RGB array, or None if the data is unusable"""
        if self.format == "jpeg":
            buffer = np.frombuffer(bytes(self.data), dtype=np.uint8)
            if buffer.size == 0:
                return None
            bgr = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
            if bgr is None:
                return None
            return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
        if isinstance(self.data, np.ndarray) and self.data.size > 0:
            array = self.data
            if array.dtype != np.uint8:
                array = np.rint(array.astype(np.float32) / 257.0).astype(np.uint8)
            return np.ascontiguousarray(array)
        return None


@dataclass
class RawFields:
    """Raw shooting fields as reported by the decode layer"""
    make: str = ""
    model: str = ""
    lens: str = ""
    iso: int = 0
    aperture: float = 0.0
    focal_length: float = 0.0
    shutter: float = 0.0  # seconds
    flash_used: bool = False
    flip: int = 0
    white_balance: str = ""
    width: int = 0
    height: int = 0
    wb_coeffs: Tuple[float, ...] = field(default_factory=tuple)


class RawDecoder(ABC):
    """
    Decode collaborator used by a processing session

    One instance decodes one file at a time; ``open`` replaces whatever was
    open before and ``recycle`` releases it. Implementations raise
    ``ProcessingError`` on failure.
    """

    @abstractmethod
    def open(self, path: Path) -> None:
        pass

    @abstractmethod
    def unpack(self) -> None:
        pass

    @abstractmethod
    def unpack_thumbnail(self) -> Optional[EmbeddedThumbnail]:
        """Embedded thumbnail, or None when the file carries none"""
        pass

    @abstractmethod
    def develop(self, half_size: bool = False) -> np.ndarray:
        """Demosaic to an 8-bit RGB array"""
        pass

    @abstractmethod
    def read_fields(self) -> RawFields:
        pass

    @abstractmethod
    def recycle(self) -> None:
        pass


class RawpyDecoder(RawDecoder):
    """LibRaw decoder via rawpy, EXIF via exifread"""

    def __init__(self):
        self._raw: Optional[rawpy.RawPy] = None
        self._path: Optional[Path] = None

    def _require(self) -> rawpy.RawPy:
        if self._raw is None:
            raise ProcessingError(ErrorKind.DECODE_LIBRARY_ERROR, "Out of order call")
        return self._raw

    def open(self, path: Path) -> None:
        self.recycle()
        raw = rawpy.RawPy()
        try:
            with libraw_errors("Failed to open RAW file"):
                raw.open_file(str(path))
        except ProcessingError:
            raw.close()
            raise
        self._raw = raw
        self._path = Path(path)
        logger.debug(f"Opened {self._path.name}")

    def unpack(self) -> None:
        raw = self._require()
        with libraw_errors("Failed to unpack RAW file"):
            raw.unpack()

    def unpack_thumbnail(self) -> Optional[EmbeddedThumbnail]:
        raw = self._require()
        try:
            thumb = raw.extract_thumb()
        except (rawpy.LibRawNoThumbnailError, rawpy.LibRawUnsupportedThumbnailError) as e:
            logger.debug(f"No usable embedded thumbnail: {e}")
            return None
        except rawpy.LibRawError as e:
            raise translate_libraw_error(e, "Failed to unpack thumbnail") from e

        if thumb.format == rawpy.ThumbFormat.JPEG:
            return EmbeddedThumbnail(format="jpeg", data=thumb.data)
        return EmbeddedThumbnail(format="bitmap", data=thumb.data)

    def develop(self, half_size: bool = False) -> np.ndarray:
        raw = self._require()
        with libraw_errors("Failed to process RAW file"):
            return raw.postprocess(
                use_camera_wb=True,
                half_size=half_size,
                no_auto_bright=True,
                output_bps=8,
                bright=1.0
            )

    def read_fields(self) -> RawFields:
        raw = self._require()
        sizes = raw.sizes
        fields = RawFields(
            width=int(sizes.width),
            height=int(sizes.height),
            flip=int(sizes.flip),
            wb_coeffs=tuple(float(c) for c in raw.camera_whitebalance)
        )
        if self._path is not None:
            _read_exif(self._path, fields)
        return fields

    def recycle(self) -> None:
        if self._raw is not None:
            self._raw.close()
            self._raw = None
            self._path = None


def _parse_ratio(value: str) -> float:
    """Parse an EXIF rational like "50/1" or a plain number"""
    if '/' in value:
        num, denom = value.split('/', 1)
        denom = float(denom)
        return float(num) / denom if denom else 0.0
    return float(value)


def _read_exif(path: Path, fields: RawFields) -> None:
    """Fill ``fields`` from the file's EXIF block; missing tags stay at defaults"""
    try:
        with open(path, 'rb') as f:
            tags = exifread.process_file(f, details=False)
    except (OSError, ValueError, KeyError, IndexError) as e:
        logger.warning(f"Could not read EXIF from {path.name}: {e}")
        return

    if not tags:
        logger.warning(f"No EXIF data in {path.name}")
        return

    try:
        if 'Image Make' in tags:
            fields.make = str(tags['Image Make']).strip()
        if 'Image Model' in tags:
            fields.model = str(tags['Image Model']).strip()
        if 'EXIF LensModel' in tags:
            fields.lens = str(tags['EXIF LensModel']).strip()
        if 'EXIF ISOSpeedRatings' in tags:
            fields.iso = int(str(tags['EXIF ISOSpeedRatings']).split(',')[0].strip('[] '))
        if 'EXIF FNumber' in tags:
            fields.aperture = _parse_ratio(str(tags['EXIF FNumber']))
        if 'EXIF FocalLength' in tags:
            fields.focal_length = _parse_ratio(str(tags['EXIF FocalLength']))
        if 'EXIF ExposureTime' in tags:
            fields.shutter = _parse_ratio(str(tags['EXIF ExposureTime']))
        if 'EXIF Flash' in tags:
            flash = tags['EXIF Flash'].values
            fields.flash_used = bool(flash[0] & 1) if flash else False
        if 'EXIF WhiteBalance' in tags:
            fields.white_balance = str(tags['EXIF WhiteBalance'])
    except (ValueError, TypeError, IndexError) as e:
        logger.warning(f"Malformed EXIF value in {path.name}: {e}")
