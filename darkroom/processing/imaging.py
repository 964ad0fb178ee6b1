"""
Small numeric helpers shared by the adjustment stages

Stages exchange 8-bit BGR arrays; inside a stage work happens in float32
normalised to [0, 1].
"""

import numpy as np
import cv2


def to_float(image: np.ndarray) -> np.ndarray:
    """8-bit image to float32 in [0, 1] (always a new array)"""
    return image.astype(np.float32) / 255.0


def to_uint8(image: np.ndarray) -> np.ndarray:
    """Clamp a [0, 1] float image and round back to 8-bit"""
    return np.rint(np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)


def luminance(image: np.ndarray) -> np.ndarray:
    """Rec.601 luma of a float BGR image"""
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def blend(original: np.ndarray, adjusted: np.ndarray, weight: np.ndarray) -> np.ndarray:
    """Per-pixel mix of two images; ``weight`` is HxW in [0, 1]"""
    if weight.ndim == 2 and original.ndim == 3:
        weight = weight[:, :, np.newaxis]
    return original * (1.0 - weight) + adjusted * weight
