"""
Host-facing boundary for darkroom

``RawEditor`` is what an application (or the CLI) drives: it owns a
``SessionTable``, hands out integer session handles and returns a
``Result`` from every handle operation. Several editors can coexist; there
is no process-wide registry.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import cv2

from . import __version__
from .config import load_config, get_config_value
from .core.raster import RasterImage
from .core.result import (
    BoolResult, ErrorKind, ImageResult, MetadataResult, Result, StringResult
)
from .io.decoder import RawDecoder, RawpyDecoder, SUPPORTED_INPUT_FORMATS
from .io.writer import save_image
from .processing.params import AdjustmentParams, ProcessingOptions
from .session.registry import SessionTable
from .session.session import ProcessingSession
from .utils.logging import StructuredLogger

logger = logging.getLogger(__name__)


class RawEditor:
    """
    Session manager and boundary API

    Handle operations on unknown or destroyed handles, and calls missing a
    required argument, return an ``INVALID_PARAMETERS`` error.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 decoder_factory: Callable[[], RawDecoder] = RawpyDecoder):
        """
        Args:
            config: Configuration dictionary (loaded from config.yaml if None)
            decoder_factory: Builds one decoder per new session
        """
        self.config = config if config is not None else load_config()
        self.decoder_factory = decoder_factory
        self.sessions = SessionTable()
        self.log = StructuredLogger(__name__, {'component': 'editor'})
        self._initialized = False

    # Library level

    def initialize(self) -> BoolResult:
        """Apply process-level settings; calling again is harmless"""
        if self._initialized:
            return Result.ok(True)
        threads = int(get_config_value(self.config, 'processing.threads', 0) or 0)
        if threads > 0:
            cv2.setNumThreads(threads)
        self._initialized = True
        self.log.info("Editor initialized", version=__version__, threads=threads)
        return Result.ok(True)

    def finalize(self) -> BoolResult:
        """Destroy every session"""
        count = self.sessions.clear_all()
        self._initialized = False
        self.log.info("Editor finalized", sessions_released=count)
        return Result.ok(True)

    @staticmethod
    def get_version() -> str:
        return __version__

    @staticmethod
    def get_supported_formats() -> List[str]:
        return list(SUPPORTED_INPUT_FORMATS)

    # Session lifecycle

    def create_session(self) -> int:
        session = ProcessingSession(
            self.decoder_factory(),
            preview_bounds=self._preview_bounds()
        )
        handle = self.sessions.create(session)
        self.log.debug("Session created", handle=handle, active=len(self.sessions))
        return handle

    def destroy_session(self, handle: int) -> None:
        """Unknown handles are ignored"""
        if self.sessions.destroy(handle):
            self.log.debug("Session destroyed", handle=handle, active=len(self.sessions))

    # Handle operations

    def load(self, handle: int, path: Union[str, Path]) -> BoolResult:
        if path is None:
            return Result.err(ErrorKind.INVALID_PARAMETERS, "No file path given")
        return self._with_session(handle, lambda s: s.load(path))

    def extract_metadata(self, handle: int) -> MetadataResult:
        return self._with_session(handle, lambda s: s.extract_metadata())

    def generate_thumbnail(self, handle: int, max_size: Optional[int] = None) -> ImageResult:
        if max_size is None:
            max_size = int(get_config_value(self.config, 'thumbnail.max_size', 512))
        return self._with_session(handle, lambda s: s.generate_thumbnail(max_size))

    def generate_preview(self, handle: int, params: AdjustmentParams,
                         options: Optional[ProcessingOptions] = None) -> ImageResult:
        if params is None:
            return Result.err(ErrorKind.INVALID_PARAMETERS, "No adjustment parameters given")
        if options is None:
            options = self.preview_options()
        return self._with_session(handle, lambda s: s.generate_preview(params, options))

    def process_full_image(self, handle: int, params: AdjustmentParams,
                           options: Optional[ProcessingOptions] = None) -> ImageResult:
        if params is None:
            return Result.err(ErrorKind.INVALID_PARAMETERS, "No adjustment parameters given")
        if options is None:
            options = self.export_options()
        return self._with_session(handle, lambda s: s.process_full_image(params, options))

    def save(self, handle: int, image: RasterImage, path: Union[str, Path],
             fmt: str = "JPEG", quality: Optional[int] = None) -> BoolResult:
        if image is None or path is None:
            return Result.err(ErrorKind.INVALID_PARAMETERS, "Image and output path are required")
        if quality is None:
            quality = int(get_config_value(self.config, 'export.quality', 95))
        return self._with_session(handle, lambda s: save_image(image, path, fmt, quality))

    def get_current_path(self, handle: int) -> StringResult:
        return self._with_session(handle, lambda s: Result.ok(s.current_path))

    def is_loaded(self, handle: int) -> BoolResult:
        return self._with_session(handle, lambda s: Result.ok(s.is_loaded))

    def clear(self, handle: int) -> BoolResult:
        def clear_session(session: ProcessingSession) -> BoolResult:
            session.clear()
            return Result.ok(True)
        return self._with_session(handle, clear_session)

    # Option defaults from configuration

    def preview_options(self) -> ProcessingOptions:
        max_width, max_height = self._preview_bounds()
        return ProcessingOptions.for_preview(
            max_width=max_width,
            max_height=max_height,
            quality=int(get_config_value(self.config, 'preview.quality',
                                         ProcessingOptions.PREVIEW_QUALITY))
        )

    def export_options(self) -> ProcessingOptions:
        return ProcessingOptions(
            quality=int(get_config_value(self.config, 'export.quality', 95)),
            thread_hint=int(get_config_value(self.config, 'processing.threads', 0) or 0)
        )

    def _preview_bounds(self):
        return (
            int(get_config_value(self.config, 'preview.max_width',
                                 ProcessingOptions.PREVIEW_MAX_WIDTH)),
            int(get_config_value(self.config, 'preview.max_height',
                                 ProcessingOptions.PREVIEW_MAX_HEIGHT)),
        )

    def _with_session(self, handle: int,
                      operation: Callable[[ProcessingSession], Result]) -> Result:
        session = self.sessions.get(handle)
        if session is None:
            logger.error(f"Invalid session handle: {handle}")
            return Result.err(ErrorKind.INVALID_PARAMETERS, f"Invalid session handle: {handle}")
        return operation(session)
