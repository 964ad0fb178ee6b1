"""
Base-image cache

Holds the last decoded base raster of a session so repeated previews only
pay for the adjustment stages. The cache is deliberately not keyed by the
processing options: once filled, later renders reuse the same base even if
they ask for a different size or preview mode. Call ``invalidate`` (done by
``load`` and ``clear``) to force a fresh decode.
"""

import logging
from typing import Callable, Optional

from ..core.raster import RasterImage

logger = logging.getLogger(__name__)


class BaseImageCache:
    """Single-slot cache of a decoded base raster"""

    def __init__(self):
        self._base: Optional[RasterImage] = None
        self._valid = False
        self.fill_count = 0

    @property
    def is_valid(self) -> bool:
        return self._valid and self._base is not None

    def get_or_decode(self, decode_fn: Callable[[], RasterImage]) -> RasterImage:
        """
        Return a copy of the cached base, decoding it first if needed

        Args:
            decode_fn: Called at most once per fill to produce the base

        Returns:
            A copy; the cached raster itself is never handed out
        """
        if self.is_valid:
            logger.debug("Base image cache hit")
            return self._base.copy()

        base = decode_fn()
        self._base = base
        self._valid = True
        self.fill_count += 1
        logger.debug(f"Base image cache filled with {base!r}")
        return base.copy()

    def invalidate(self):
        self._base = None
        self._valid = False
