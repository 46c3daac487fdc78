"""
Aperture Filter Engine.

Two sliding-window evaluators over border-extended input:
- linear_filter: weighted sum of the window (convolution), vectorized per
  row band with NumPy
- nonlinear_filter: arbitrary callable evaluated on every pixel's window

Both compute in float64 and materialize the result once in the encoding of
the input image. Inputs are never mutated. Row bands are distributed by the
parallel scheduler.
"""

import logging
from typing import Callable, Optional, Sequence, Union

import numpy as np

from pixelflow.core.color import Color
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import Encoding, Extrapolation
from pixelflow.core.exceptions import InvalidArgumentError, verify_positive
from pixelflow.core.geometry import Point, Size
from pixelflow.core.image import Image, PointLike
from pixelflow.parallel.scheduler import ParallelScheduler, resolve_scheduler
from pixelflow.vision.border import pad_array

logger = logging.getLogger(__name__)

# Callable evaluated on every window: wide-encoded aperture view -> channel values
ApertureOperator = Callable[[Image], Union[Color, Sequence[float], np.ndarray]]


def verify_anchor(anchor: Optional[PointLike], size: Size, name: str = "anchor") -> Point:
    """
    Resolve and validate an anchor point inside a kernel or window.

    Args:
        anchor: Anchor, or None for the centre of size
        size: Kernel or window size
        name: Parameter name used in errors

    Returns:
        Anchor point with 0 <= x < width and 0 <= y < height
    """
    if anchor is None:
        return size.center
    if not isinstance(anchor, Point):
        x, y = anchor
        if x < 0 or y < 0:
            raise InvalidArgumentError(
                f"Parameter '{name}' ({x}, {y}) must be inside the kernel "
                f"{size.width}x{size.height}",
                parameter=name,
            )
        anchor = Point(x=x, y=y)
    if anchor.x >= size.width or anchor.y >= size.height:
        raise InvalidArgumentError(
            f"Parameter '{name}' ({anchor.x}, {anchor.y}) must be inside the kernel "
            f"{size.width}x{size.height}",
            parameter=name,
        )
    return anchor


def verify_window(window: Union[Size, int, Sequence[int]], name: str = "window") -> Size:
    """Convert window to a Size with positive extents."""
    if isinstance(window, Size):
        width, height = window.width, window.height
    elif isinstance(window, int):
        width = height = window
    else:
        width, height = window
    return Size(
        width=verify_positive(width, f"{name}.width"),
        height=verify_positive(height, f"{name}.height"),
    )


def verify_odd_window(window: Union[Size, int, Sequence[int]], name: str = "window") -> Size:
    """Like verify_window, additionally requiring odd extents (1, 3, 5, ...)."""
    size = verify_window(window, name)
    if not size.is_odd:
        raise InvalidArgumentError(
            f"Parameter '{name}' ({size.width}x{size.height}) must have odd size for both "
            f"dimensions (1, 3, 5, ...)",
            parameter=name,
        )
    return size


def as_kernel(kernel, name: str = "kernel") -> np.ndarray:
    """Convert kernel to a non-empty 2-D float64 matrix (rows = height); 1-D is one row."""
    matrix = np.array(kernel, dtype=np.float64)
    if matrix.ndim == 1:
        matrix = matrix[np.newaxis, :]
    if matrix.ndim != 2 or matrix.size == 0:
        raise InvalidArgumentError(
            f"Parameter '{name}' must be a non-empty 2-D matrix, got shape {matrix.shape}",
            parameter=name,
        )
    if not np.all(np.isfinite(matrix)):
        raise InvalidArgumentError(f"Parameter '{name}' must be finite", parameter=name)
    return matrix


def materialize(image: Image, values: np.ndarray) -> Image:
    """New image shaped and encoded like image, holding values (round + clamp if narrow)."""
    result = image.same()
    result.write_array(values)
    return result


def convolve(
    image: Image,
    kernel: np.ndarray,
    anchor: Point,
    extrapolation: Extrapolation,
    scheduler: ParallelScheduler,
) -> np.ndarray:
    """
    Raw weighted window sums of image as a float64 (height, width, channels) array.

    Args:
        image: Source image
        kernel: 2-D float64 matrix
        anchor: Validated anchor inside the kernel
        extrapolation: Border policy
        scheduler: Scheduler distributing row bands

    Returns:
        sum kernel[j, i] * input(x + i - anchor.x, y + j - anchor.y) per sample
    """
    kernel_height, kernel_width = kernel.shape
    width, height, channels = image.width, image.height, image.channels
    padded = pad_array(
        image.as_array(),
        top=anchor.y,
        bottom=kernel_height - 1 - anchor.y,
        left=anchor.x,
        right=kernel_width - 1 - anchor.x,
        extrapolation=extrapolation,
    )
    sums = np.empty((height, width, channels), dtype=np.float64)

    def band(y_start: int, y_stop: int) -> None:
        acc = np.zeros((y_stop - y_start, width, channels), dtype=np.float64)
        for j in range(kernel_height):
            for i in range(kernel_width):
                weight = kernel[j, i]
                if weight != 0.0:
                    acc += weight * padded[y_start + j : y_stop + j, i : i + width, :]
        sums[y_start:y_stop] = acc

    scheduler.for_each_band(image, band)
    return sums


def linear_filter(
    image: Image,
    kernel,
    scale: float = 1.0,
    offset: float = 0.0,
    anchor: Optional[PointLike] = None,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REFLECT,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Convolve image with kernel.

    Output sample = (sum kernel[j, i] * input(x + i - anchor.x, y + j - anchor.y))
    * scale + offset, with out-of-bounds inputs produced by extrapolation.

    Args:
        image: Source image
        kernel: 2-D matrix (rows = kernel height); any size, non-square allowed
        scale: Multiplier applied to the sum
        offset: Added after scaling
        anchor: Kernel element aligned with the output pixel, default centre
        extrapolation: Border policy
        scheduler: Scheduler to use, default process-wide

    Returns:
        New image with the size, channels and encoding of image
    """
    matrix = as_kernel(kernel)
    kernel_size = Size(width=matrix.shape[1], height=matrix.shape[0])
    anchor = verify_anchor(anchor, kernel_size)
    extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")
    scheduler = resolve_scheduler(scheduler)

    logger.debug(
        f"Linear filter {kernel_size.width}x{kernel_size.height} anchor {anchor.as_tuple()} "
        f"on {image.width}x{image.height}x{image.channels} ({extrapolation.value})"
    )
    sums = convolve(image, matrix, anchor, extrapolation, scheduler)
    return materialize(image, sums * scale + offset)


def separable_filter(
    image: Image,
    kernel_x,
    kernel_y,
    scale: float = 1.0,
    offset: float = 0.0,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REFLECT,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Apply a horizontal then a vertical 1-D kernel.

    Equivalent to linear_filter with the outer product kernel_y x kernel_x.
    The intermediate pass stays in float64; scale and offset apply once.

    Args:
        image: Source image
        kernel_x: Row vector, applied along x
        kernel_y: Column vector, applied along y
    """
    row = as_kernel(np.ravel(kernel_x), "kernel_x")
    column = as_kernel(np.ravel(kernel_y), "kernel_y").T
    extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")
    scheduler = resolve_scheduler(scheduler)

    horizontal = convolve(
        image, row, Size(width=row.shape[1], height=1).center, extrapolation, scheduler
    )
    intermediate = Image.from_array(horizontal, Encoding.WIDE)
    vertical = convolve(
        intermediate,
        column,
        Size(width=1, height=column.shape[0]).center,
        extrapolation,
        scheduler,
    )
    return materialize(image, vertical * scale + offset)


def _channel_values(value, channels: int) -> np.ndarray:
    values = value.to_array() if isinstance(value, Color) else np.asarray(value, dtype=np.float64)
    values = values.ravel()
    if values.size != channels:
        raise InvalidArgumentError(
            f"Aperture operator returned {values.size} channel(s), expected {channels}",
            parameter="operator",
        )
    return values


def nonlinear_filter(
    image: Image,
    window: Union[Size, int, Sequence[int]],
    operator: ApertureOperator,
    anchor: Optional[PointLike] = None,
    iterations: int = 1,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Evaluate operator over every pixel's window.

    The operator receives a wide-encoded view of the border-extended window
    (window coordinates, anchor at `anchor`) and returns the output pixel as a
    Color or a sequence of channel values. Passes are chained: the output of
    pass k is the input of pass k + 1.

    Args:
        image: Source image
        window: Aperture size (int for a square)
        operator: Callable aperture -> channel values
        anchor: Window element aligned with the output pixel, default centre
        iterations: Number of passes (>= 1)
        extrapolation: Border policy
        scheduler: Scheduler to use, default process-wide

    Returns:
        New image with the size, channels and encoding of image
    """
    window = verify_window(window)
    anchor = verify_anchor(anchor, window)
    iterations = verify_positive(iterations, "iterations")
    extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")
    if not callable(operator):
        raise InvalidArgumentError("Parameter 'operator' must be callable", parameter="operator")
    scheduler = resolve_scheduler(scheduler)

    width, height, channels = image.width, image.height, image.channels
    logger.debug(
        f"Non-linear filter {window.width}x{window.height} anchor {anchor.as_tuple()}, "
        f"{iterations} pass(es) on {width}x{height}x{channels}"
    )

    source = image
    for _ in range(iterations):
        padded = Image.from_array(
            pad_array(
                source.as_array(),
                top=anchor.y,
                bottom=window.height - 1 - anchor.y,
                left=anchor.x,
                right=window.width - 1 - anchor.x,
                extrapolation=extrapolation,
            ),
            Encoding.WIDE,
        )
        values = np.empty((height, width, channels), dtype=np.float64)

        def band(y_start: int, y_stop: int) -> None:
            for y in range(y_start, y_stop):
                for x in range(width):
                    aperture = padded.get_subimage((x, y, window.width, window.height))
                    values[y, x, :] = _channel_values(operator(aperture), channels)

        scheduler.for_each_band(image, band)
        source = materialize(image, values)

    return source
