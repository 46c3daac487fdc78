"""
Color: fixed-length, immutable tuple of channel intensities.
"""

import math
from typing import Iterable, Iterator, Sequence, Tuple, Union

import numpy as np

from pixelflow.core.constants import ColorConstants, PrecisionConstants
from pixelflow.core.exceptions import InvalidArgumentError, OutOfRangeError, verify_positive


class Color:
    """
    Per-pixel channel values.

    Values are kept as given (no clamping); narrow storage clamps them to
    [0, 255] when the color is written into an image.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Union[Iterable[float], np.ndarray]):
        values = tuple(float(v) for v in np.asarray(values, dtype=np.float64).ravel())
        if not values:
            raise InvalidArgumentError("Color must have at least one channel", parameter="values")
        if any(math.isnan(v) for v in values):
            raise InvalidArgumentError("Value of color should not be a NaN", parameter="values")
        object.__setattr__(self, "_values", values)

    @classmethod
    def filled(cls, channels: int, value: float = ColorConstants.MIN_VALUE) -> "Color":
        """Create a color with every channel set to value."""
        channels = verify_positive(channels, "channels")
        return cls([value] * channels)

    def __setattr__(self, name, value):
        raise AttributeError("Color is immutable")

    @property
    def channels(self) -> int:
        return len(self._values)

    @property
    def values(self) -> Tuple[float, ...]:
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __getitem__(self, channel: int) -> float:
        if not 0 <= channel < len(self._values):
            raise OutOfRangeError(
                f"Value of 'channel' (= {channel}) must be in interval 0..{len(self._values) - 1}",
                parameter="channel",
                value=channel,
            )
        return self._values[channel]

    def to_array(self) -> np.ndarray:
        return np.array(self._values, dtype=np.float64)

    def clamped(self) -> "Color":
        """Copy with every channel clamped to [0, 255]."""
        return Color(np.clip(self._values, ColorConstants.MIN_VALUE, ColorConstants.MAX_VALUE))

    def distance(self, other: "Color") -> float:
        """
        Normalized Euclidean distance: sqrt(sum of squared differences / channels).

        For a single channel this is the absolute difference.
        """
        if other.channels != self.channels:
            raise InvalidArgumentError(
                f"Given color must have same number of channels (= {other.channels}) "
                f"as current color (= {self.channels})",
                parameter="other",
            )
        return color_distance(self.to_array(), other.to_array())

    def equals(self, other: object, precision: float = PrecisionConstants.EPSILON) -> bool:
        if not isinstance(other, Color):
            return False
        if other is self:
            return True
        if other.channels != self.channels:
            return False
        return all(abs(a - b) <= precision for a, b in zip(self._values, other._values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Color({list(self._values)})"


def color_distance(first: Sequence[float], second: Sequence[float]) -> float:
    """Normalized Euclidean distance between two channel vectors."""
    diff = np.asarray(first, dtype=np.float64) - np.asarray(second, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff) / diff.size))
