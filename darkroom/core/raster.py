"""
In-memory raster value type

A RasterImage is an immutable pixel buffer. Stages never modify a raster in
place: they read it through ``to_array()`` (which always copies) and build a
new instance from their output.
"""

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from .result import ErrorKind, ProcessingError

_DTYPES = {8: np.uint8, 16: np.uint16}


@dataclass(frozen=True)
class RasterImage:
    """Dense pixel grid stored row-major, channels interleaved"""
    pixels: bytes
    width: int
    height: int
    channels: int
    bit_depth: int = 8

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterImage":
        """
        Build a raster from an HxW or HxWxC numpy array

        Args:
            array: uint8 or uint16 image data

        Returns:
            New RasterImage owning a copy of the data
        """
        if array is None or array.size == 0:
            raise ProcessingError(ErrorKind.INVALID_PARAMETERS, "Empty image array")
        if array.dtype == np.uint8:
            bit_depth = 8
        elif array.dtype == np.uint16:
            bit_depth = 16
        else:
            raise ProcessingError(
                ErrorKind.INVALID_PARAMETERS,
                f"Unsupported pixel type: {array.dtype}"
            )
        if array.ndim == 2:
            height, width = array.shape
            channels = 1
        elif array.ndim == 3:
            height, width, channels = array.shape
        else:
            raise ProcessingError(
                ErrorKind.INVALID_PARAMETERS,
                f"Expected a 2-D or 3-D array, got {array.ndim} dimensions"
            )
        return cls(
            pixels=np.ascontiguousarray(array).tobytes(),
            width=int(width),
            height=int(height),
            channels=int(channels),
            bit_depth=bit_depth
        )

    def is_valid(self) -> bool:
        """Check dimensions and buffer length agree"""
        if self.width <= 0 or self.height <= 0 or self.channels <= 0 or self.bit_depth <= 0:
            return False
        expected = self.width * self.height * self.channels * (self.bit_depth // 8)
        return len(self.pixels) == expected

    def to_array(self) -> np.ndarray:
        """Return a writable HxWxC copy of the pixels"""
        if not self.is_valid():
            raise ProcessingError(ErrorKind.INVALID_PARAMETERS, "Invalid raster image")
        dtype = _DTYPES.get(self.bit_depth)
        if dtype is None:
            raise ProcessingError(
                ErrorKind.INVALID_FORMAT,
                f"Unsupported bit depth: {self.bit_depth}"
            )
        flat = np.frombuffer(self.pixels, dtype=dtype)
        return flat.reshape(self.height, self.width, self.channels).copy()

    def copy(self) -> "RasterImage":
        return replace(self, pixels=bytes(bytearray(self.pixels)))

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.height, self.width, self.channels)

    @property
    def size(self) -> int:
        return len(self.pixels)

    @property
    def long_edge(self) -> int:
        return max(self.width, self.height)

    def mean(self) -> float:
        """Mean sample value over all channels"""
        return float(self.to_array().mean())

    def __repr__(self) -> str:
        return (f"RasterImage({self.width}x{self.height}, channels={self.channels}, "
                f"bit_depth={self.bit_depth})")
