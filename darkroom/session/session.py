"""
Processing session: one loaded RAW source, its cache and its renders

A session is not thread-safe. Concurrent calls against the same session
(for example two overlapping previews) must be serialised by the caller.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

import cv2
import numpy as np

from ..core.raster import RasterImage
from ..core.result import (
    BoolResult, ErrorKind, ImageResult, MetadataResult, ProcessingError, Result
)
from ..io.decoder import RawDecoder
from ..io.metadata import metadata_from_fields
from ..processing.geometry.transform import resize_to_fit
from ..processing.params import AdjustmentParams, ProcessingOptions
from ..processing.pipeline import AdjustmentPipeline
from .cache import BaseImageCache

logger = logging.getLogger(__name__)

NOT_LOADED_MESSAGE = "No RAW file loaded"


class ProcessingSession:
    """
    Owns one decoder, the base-image cache and the render pipeline

    Every public operation returns a Result; nothing raises past this
    class.
    """

    def __init__(self, decoder: RawDecoder,
                 pipeline: Optional[AdjustmentPipeline] = None,
                 preview_bounds: Tuple[int, int] = (ProcessingOptions.PREVIEW_MAX_WIDTH,
                                                    ProcessingOptions.PREVIEW_MAX_HEIGHT)):
        """
        Args:
            decoder: Decode collaborator owned by this session
            pipeline: Adjustment pipeline (a new one if omitted)
            preview_bounds: Base size used for preview decodes that give no
                explicit output bounds
        """
        self.decoder = decoder
        self.pipeline = pipeline or AdjustmentPipeline()
        self.preview_bounds = preview_bounds
        self.cache = BaseImageCache()
        self._path: Optional[Path] = None
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def current_path(self) -> str:
        return str(self._path) if self._path is not None else ""

    def load(self, path: Union[str, Path]) -> BoolResult:
        """Open and unpack a RAW file, replacing anything loaded before"""
        self.clear()
        if not isinstance(path, (str, Path)) or str(path) == "":
            return Result.err(ErrorKind.INVALID_PARAMETERS, "No file path given")

        path = Path(path)
        logger.info(f"Loading RAW file: {path}")
        if not path.is_file():
            logger.error(f"File not found: {path}")
            return Result.err(ErrorKind.FILE_NOT_FOUND, f"File not found: {path}")

        try:
            self.decoder.open(path)
            self.decoder.unpack()
        except ProcessingError as e:
            logger.error(f"Failed to load {path.name}: {e.message}")
            self.decoder.recycle()
            return Result.from_error(e)
        except MemoryError:
            self.decoder.recycle()
            return Result.err(ErrorKind.MEMORY_ALLOCATION, f"Out of memory loading {path}")
        except Exception as e:
            logger.error(f"Unexpected error loading {path.name}: {e}")
            self.decoder.recycle()
            return Result.err(ErrorKind.UNKNOWN, f"Unexpected error loading {path}: {e}")

        self._path = path
        self._loaded = True
        self.cache.invalidate()
        logger.info(f"Loaded {path.name}")
        return Result.ok(True)

    def extract_metadata(self) -> MetadataResult:
        if not self._loaded:
            return Result.err(ErrorKind.INVALID_PARAMETERS, NOT_LOADED_MESSAGE)
        try:
            metadata = metadata_from_fields(self.decoder.read_fields())
        except ProcessingError as e:
            return Result.from_error(e)
        except Exception as e:
            logger.error(f"Could not read metadata fields: {e}")
            return Result.err(ErrorKind.UNKNOWN, f"Could not read metadata: {e}")
        if not metadata.camera_make:
            logger.warning(f"No camera information in {self._path.name}")
        return Result.ok(metadata)

    def generate_thumbnail(self, max_size: int = 512) -> ImageResult:
        """
        Small RGB image for browsing

        Uses the embedded preview when the file has a decodable one and
        falls back to a half-size develop otherwise. The long edge never
        exceeds ``max_size``.
        """
        if not self._loaded:
            return Result.err(ErrorKind.INVALID_PARAMETERS, NOT_LOADED_MESSAGE)
        if not isinstance(max_size, int) or max_size <= 0:
            return Result.err(ErrorKind.INVALID_PARAMETERS,
                              f"Thumbnail size must be a positive integer, got {max_size!r}")

        def build() -> RasterImage:
            rgb = self._embedded_thumbnail()
            if rgb is None:
                logger.warning("Embedded thumbnail unavailable, developing RAW instead")
                rgb = self.decoder.develop(half_size=True)
            return RasterImage.from_array(resize_to_fit(rgb, max_size, max_size))

        return self._guarded("thumbnail", build)

    def _embedded_thumbnail(self) -> Optional[np.ndarray]:
        try:
            thumbnail = self.decoder.unpack_thumbnail()
        except ProcessingError as e:
            logger.warning(f"Could not unpack embedded thumbnail: {e.message}")
            return None
        if thumbnail is None:
            return None
        return thumbnail.to_rgb()

    def generate_preview(self, params: AdjustmentParams,
                         options: ProcessingOptions) -> ImageResult:
        """Render through the base-image cache"""
        if not self._loaded:
            return Result.err(ErrorKind.INVALID_PARAMETERS, NOT_LOADED_MESSAGE)

        options = _checked_options(options)
        if options is None:
            return Result.err(ErrorKind.INVALID_PARAMETERS, "Invalid processing options")
        base = self._guarded(
            "preview decode",
            lambda: self.cache.get_or_decode(lambda: self._decode_base(options))
        )
        if base.is_error:
            return base
        return self.pipeline.render(base.value, params, options)

    def process_full_image(self, params: AdjustmentParams,
                           options: ProcessingOptions) -> ImageResult:
        """
        Render from a fresh full-resolution decode

        The preview cache is neither used nor replaced.
        """
        if not self._loaded:
            return Result.err(ErrorKind.INVALID_PARAMETERS, NOT_LOADED_MESSAGE)

        options = _checked_options(options)
        if options is None:
            return Result.err(ErrorKind.INVALID_PARAMETERS, "Invalid processing options")
        options = options.with_full_resolution()
        decoded = self._guarded("full decode", lambda: self._decode_base(options))
        if decoded.is_error:
            return decoded
        result = self.pipeline.render(decoded.value, params, options)
        if result.is_success:
            logger.info(f"Full render complete: {result.value.width}x{result.value.height}")
        return result

    def clear(self):
        """Release decoder state and the cache; safe to call repeatedly"""
        self.decoder.recycle()
        self.cache.invalidate()
        self._path = None
        self._loaded = False

    def _decode_base(self, options: ProcessingOptions) -> RasterImage:
        """
        Develop the loaded file into a base raster

        Preview decodes run at half size and are fitted to the requested
        bounds, or to ``preview_bounds`` when none are given.
        """
        rgb = self.decoder.develop(half_size=options.preview_mode)
        if options.preview_mode:
            max_width, max_height = options.bounds()
            if max_width == 0 and max_height == 0:
                max_width, max_height = self.preview_bounds
            rgb = resize_to_fit(rgb, max_width, max_height)
        base = RasterImage.from_array(rgb)
        logger.debug(f"Decoded base {base!r} (preview={options.preview_mode})")
        return base

    def _guarded(self, description: str, fn: Callable[[], RasterImage]) -> ImageResult:
        try:
            return Result.ok(fn())
        except ProcessingError as e:
            logger.error(f"{description} failed: {e.message}")
            return Result.from_error(e)
        except cv2.error as e:
            logger.error(f"OpenCV error during {description}: {e}")
            return Result.err(ErrorKind.PRIMITIVES_LIBRARY_ERROR, f"OpenCV error: {e}")
        except MemoryError:
            logger.error(f"Out of memory during {description}")
            return Result.err(ErrorKind.MEMORY_ALLOCATION, "Memory allocation failed")
        except Exception as e:
            logger.error(f"Unexpected error during {description}: {e}")
            return Result.err(ErrorKind.UNKNOWN, f"Unexpected error during {description}: {e}")


def _checked_options(options: Optional[ProcessingOptions]) -> Optional[ProcessingOptions]:
    """Normalised options, or None when ``options`` is not usable"""
    if options is None:
        return ProcessingOptions().normalized()
    if not isinstance(options, ProcessingOptions):
        logger.error(f"Expected ProcessingOptions, got {type(options).__name__}")
        return None
    try:
        return options.normalized()
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid processing options: {e}")
        return None
