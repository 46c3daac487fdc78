"""
Pixel storage - dense row-major sample buffers.

Two concrete encodings share one addressing contract (x, y, channel):
- NarrowStorage: 8-bit unsigned integers, written with round-half-up + clamp
- WideStorage: 64-bit floats, written raw

Storage is allocated once with fixed dimensions and never resized. It has no
knowledge of the Image views that alias it.
"""

import logging
import math

import numpy as np

from pixelflow.core.constants import ColorConstants
from pixelflow.core.enums import Encoding
from pixelflow.core.exceptions import InvalidArgumentError, verify_positive

logger = logging.getLogger(__name__)


class PixelStorage:
    """Common interface of the two storage encodings."""

    encoding: Encoding
    dtype: np.dtype

    def __init__(self, width: int, height: int, channels: int):
        self.width = verify_positive(width, "width")
        self.height = verify_positive(height, "height")
        self.channels = verify_positive(channels, "channels")
        self.data = np.zeros((self.height, self.width, self.channels), dtype=self.dtype)

    def encode(self, values) -> np.ndarray:
        """Convert float samples to this storage's representation."""
        raise NotImplementedError

    def encode_scalar(self, value: float):
        raise NotImplementedError

    def read(self, x: int, y: int, channel: int) -> float:
        return float(self.data[y, x, channel])

    def write(self, x: int, y: int, channel: int, value: float) -> None:
        self.data[y, x, channel] = self.encode_scalar(value)

    @property
    def nbytes(self) -> int:
        return self.data.nbytes

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(width={self.width}, height={self.height}, "
            f"channels={self.channels})"
        )


class NarrowStorage(PixelStorage):
    """8-bit integer samples in [0, 255]."""

    encoding = Encoding.NARROW
    dtype = np.dtype(np.uint8)

    def encode(self, values) -> np.ndarray:
        values = np.asarray(values, dtype=np.float64)
        rounded = np.floor(values + 0.5)
        return np.clip(rounded, ColorConstants.NARROW_MIN, ColorConstants.NARROW_MAX).astype(
            np.uint8
        )

    def encode_scalar(self, value: float) -> int:
        value = math.floor(value + 0.5) if math.isfinite(value) else value
        return int(min(max(value, ColorConstants.NARROW_MIN), ColorConstants.NARROW_MAX))


class WideStorage(PixelStorage):
    """64-bit floating samples, stored without clamping."""

    encoding = Encoding.WIDE
    dtype = np.dtype(np.float64)

    def encode(self, values) -> np.ndarray:
        return np.asarray(values, dtype=np.float64)

    def encode_scalar(self, value: float) -> float:
        return float(value)


STORAGE_TYPES = {
    Encoding.NARROW: NarrowStorage,
    Encoding.WIDE: WideStorage,
}


def create_storage(encoding: Encoding, width: int, height: int, channels: int) -> PixelStorage:
    """Allocate zero-filled storage of the given encoding."""
    storage_class = STORAGE_TYPES.get(encoding)
    if storage_class is None:
        raise InvalidArgumentError(
            f"Value of 'encoding' is unknown: {encoding!r}", parameter="encoding", value=encoding
        )
    storage = storage_class(width, height, channels)
    logger.debug(f"Allocated {storage!r} ({storage.nbytes} bytes)")
    return storage
