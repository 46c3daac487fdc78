"""
Morphological operations on a rectangular structuring window.

Erode and dilate are windowed minimum and maximum evaluated through the
non-linear aperture filter; every other operation is a composition of the two.
"""

import logging
from typing import Optional, Sequence, Union

from pixelflow.core import arithmetic
from pixelflow.core.constants import FilterConstants
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import Extrapolation, MorphologyOperation
from pixelflow.core.exceptions import verify_positive
from pixelflow.core.geometry import Size
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import ParallelScheduler
from pixelflow.vision.aperture import nonlinear_filter, verify_odd_window

logger = logging.getLogger(__name__)

Window = Union[Size, int, Sequence[int]]


def _minimum(aperture: Image):
    return aperture.as_array().min(axis=(0, 1))


def _maximum(aperture: Image):
    return aperture.as_array().max(axis=(0, 1))


def erode(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Windowed minimum, repeated `iterations` times."""
    window = verify_odd_window(window)
    return nonlinear_filter(
        image,
        window,
        _minimum,
        iterations=iterations,
        extrapolation=extrapolation,
        scheduler=scheduler,
    )


def dilate(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Windowed maximum, repeated `iterations` times."""
    window = verify_odd_window(window)
    return nonlinear_filter(
        image,
        window,
        _maximum,
        iterations=iterations,
        extrapolation=extrapolation,
        scheduler=scheduler,
    )


def open_(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Opening: dilate(erode(image, n), n). Removes bright details smaller than the window."""
    eroded = erode(image, window, iterations, extrapolation, scheduler)
    return dilate(eroded, window, iterations, extrapolation, scheduler)


def close(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Closing: erode(dilate(image, n), n). Fills dark details smaller than the window."""
    dilated = dilate(image, window, iterations, extrapolation, scheduler)
    return erode(dilated, window, iterations, extrapolation, scheduler)


def gradient(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Morphological gradient: dilate - erode."""
    dilated = dilate(image, window, iterations, extrapolation, scheduler)
    eroded = erode(image, window, iterations, extrapolation, scheduler)
    return arithmetic.subtract(dilated, eroded)


def white_top_hat(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """image - open(image): bright details smaller than the window."""
    opened = open_(image, window, iterations, extrapolation, scheduler)
    return arithmetic.subtract(image, opened)


def black_top_hat(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """close(image) - image: dark details smaller than the window."""
    closed = close(image, window, iterations, extrapolation, scheduler)
    return arithmetic.subtract(closed, image)


_OPERATIONS = {
    MorphologyOperation.DILATE: dilate,
    MorphologyOperation.ERODE: erode,
    MorphologyOperation.OPEN: open_,
    MorphologyOperation.CLOSE: close,
    MorphologyOperation.GRADIENT: gradient,
    MorphologyOperation.WHITE_TOP_HAT: white_top_hat,
    MorphologyOperation.BLACK_TOP_HAT: black_top_hat,
}


def apply_morphology(
    image: Image,
    window: Window = FilterConstants.DEFAULT_MORPHOLOGY_WINDOW,
    operation: Union[MorphologyOperation, str] = MorphologyOperation.DILATE,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Apply a morphological operation selected by name.

    Args:
        image: Source image
        window: Odd structuring window size
        operation: MorphologyOperation member or value
        iterations: Number of erode/dilate passes (>= 1)
        extrapolation: Border policy
        scheduler: Scheduler to use, default process-wide

    Returns:
        New image with the size, channels and encoding of image
    """
    operation = parse_enum(operation, MorphologyOperation, "operation")
    iterations = verify_positive(iterations, "iterations")
    logger.debug(f"Morphology {operation.value} x{iterations}")
    return _OPERATIONS[operation](image, window, iterations, extrapolation, scheduler)
