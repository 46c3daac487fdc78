"""
Border extrapolation.

Produces values for coordinates outside an image so that aperture operators
behave consistently near the edges:
- ZERO: samples outside the image read as 0
- REPLICATE: the nearest edge sample is repeated (aaa|abcd|ddd)
- REFLECT: mirrored including the edge sample (cba|abcd|dcb)
- WRAP: periodic continuation (bcd|abcd|abc)
"""

import logging
from typing import Optional

import cv2
import numpy as np

from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import Extrapolation
from pixelflow.core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# OpenCV matrices hold at most CV_CN_MAX channels; wider arrays are padded in chunks
MAX_CV2_CHANNELS = 512

_CV2_BORDERS = {
    Extrapolation.ZERO: cv2.BORDER_CONSTANT,
    Extrapolation.REPLICATE: cv2.BORDER_REPLICATE,
    Extrapolation.REFLECT: cv2.BORDER_REFLECT,
    Extrapolation.WRAP: cv2.BORDER_WRAP,
}


def translate_coordinate(xy: int, extent: int, extrapolation: Extrapolation) -> Optional[int]:
    """
    Map a coordinate on one axis into [0, extent).

    Args:
        xy: Coordinate, possibly outside the axis
        extent: Axis length (width or height)
        extrapolation: Border policy

    Returns:
        In-range coordinate, or None when ZERO extrapolation reads outside
    """
    extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")
    if 0 <= xy < extent:
        return xy

    if extrapolation == Extrapolation.ZERO:
        return None
    if extrapolation == Extrapolation.REPLICATE:
        return 0 if xy < 0 else extent - 1
    if extrapolation == Extrapolation.REFLECT:
        period = 2 * extent
        position = xy % period
        return period - 1 - position if position >= extent else position
    return xy % extent


def pad_array(
    array: np.ndarray,
    top: int,
    bottom: int,
    left: int,
    right: int,
    extrapolation: Extrapolation,
) -> np.ndarray:
    """
    Build an extended float64 copy of a (height, width, channels) array.

    Args:
        array: Samples to extend
        top, bottom, left, right: Border widths (>= 0)
        extrapolation: Border policy applied on every side and corner

    Returns:
        Array of shape (height + top + bottom, width + left + right, channels)
    """
    extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")
    if min(top, bottom, left, right) < 0:
        raise InvalidArgumentError(
            f"Border widths must be non-negative, got {(top, bottom, left, right)}",
            parameter="border",
        )

    if array.ndim == 2:
        array = array[:, :, np.newaxis]
    height, width, channels = array.shape
    source = np.ascontiguousarray(array, dtype=np.float64)

    if top == bottom == left == right == 0:
        return source.copy()

    border_type = _CV2_BORDERS[extrapolation]
    padded_shape = (height + top + bottom, width + left + right)
    parts = []
    for start in range(0, channels, MAX_CV2_CHANNELS):
        stop = min(start + MAX_CV2_CHANNELS, channels)
        part = cv2.copyMakeBorder(
            np.ascontiguousarray(source[:, :, start:stop]),
            top,
            bottom,
            left,
            right,
            border_type,
            value=0,
        )
        # OpenCV drops the channel axis of single-channel images
        parts.append(part.reshape(*padded_shape, stop - start))
    return parts[0] if len(parts) == 1 else np.concatenate(parts, axis=2)
