"""
Per-sample image arithmetic.

All operations compute in float64 and return a new image with the encoding
of the first operand, so narrow results are rounded and clamped once.
`integral_image` always returns a wide image.
"""

from typing import Optional, Union

import numpy as np

from pixelflow.core.color import Color
from pixelflow.core.constants import ColorConstants
from pixelflow.core.enums import Encoding
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import ParallelScheduler, resolve_scheduler

Operand = Union[Image, float, int]


def _wide(image: Image) -> np.ndarray:
    return image.as_array().astype(np.float64)


def _operand(image: Image, other: Operand, name: str) -> Union[np.ndarray, float]:
    if isinstance(other, Image):
        image.verify_same_geometry(other, name)
        return _wide(other)
    return float(other)


def _result(image: Image, values: np.ndarray) -> Image:
    result = image.same()
    result.write_array(values)
    return result


def add(image: Image, other: Operand) -> Image:
    """Sample-wise image + other (image or scalar)."""
    return _result(image, _wide(image) + _operand(image, other, "other"))


def subtract(image: Image, other: Operand) -> Image:
    """Sample-wise image - other; narrow results clamp at 0."""
    return _result(image, _wide(image) - _operand(image, other, "other"))


def abs_diff(image: Image, other: Image) -> Image:
    """Sample-wise |image - other|."""
    return _result(image, np.abs(_wide(image) - _operand(image, other, "other")))


def multiply(image: Image, other: Operand) -> Image:
    """Sample-wise product with an image or a scalar factor."""
    return _result(image, _wide(image) * _operand(image, other, "other"))


def invert(image: Image) -> Image:
    """255 - sample for every channel."""
    return _result(image, ColorConstants.MAX_VALUE - _wide(image))


def mean_color(image: Image) -> Color:
    """Average of every channel over the whole image."""
    return Color(_wide(image).mean(axis=(0, 1)))


def integral_image(image: Image, scheduler: Optional[ParallelScheduler] = None) -> Image:
    """
    Normalized summed-area table.

    Sample (x, y, c) holds the sum of channel c over the rectangle
    (0, 0)..(x, y) inclusive, divided by the pixel count N of the image, so
    every value stays in the nominal intensity range. Multiply by N to get the
    raw sum.

    Args:
        image: Source image of either encoding
        scheduler: Scheduler distributing channels, default process-wide

    Returns:
        New wide image with the size and channels of image
    """
    scheduler = resolve_scheduler(scheduler)
    source = image.as_array()
    result = Image(image.width, image.height, image.channels, Encoding.WIDE)
    target = result.as_array()
    n = image.size.n

    def channel(c: int) -> None:
        sums = np.cumsum(np.cumsum(source[:, :, c].astype(np.float64), axis=0), axis=1)
        target[:, :, c] = sums / n

    scheduler.for_each_channel(image, channel)
    return result
