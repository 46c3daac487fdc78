"""
Edge detection algorithms.

Gradient magnitude detectors (Roberts, Prewitt, Sobel, Scharr) built on the
linear filter path, plus the discrete Laplacian, sharpening and inversion.
"""

import logging
from typing import Optional, Union

import numpy as np

from pixelflow.core import arithmetic
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import EdgeMethod, Extrapolation, SharpenMethod
from pixelflow.core.exceptions import InvalidArgumentError
from pixelflow.core.geometry import Size
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import ParallelScheduler, resolve_scheduler
from pixelflow.vision.aperture import as_kernel, convolve, linear_filter, materialize

logger = logging.getLogger(__name__)

# (derivative X, derivative Y) per method
GRADIENT_KERNELS = {
    EdgeMethod.ROBERTS: (
        [[1.0, 0.0, 0.0], [0.0, -1.0, 0.0], [0.0, 0.0, 0.0]],
        [[0.0, 0.0, 0.0], [0.0, 0.0, -1.0], [0.0, 1.0, 0.0]],
    ),
    EdgeMethod.PREWITT: (
        [[-1.0, 0.0, 1.0], [-1.0, 0.0, 1.0], [-1.0, 0.0, 1.0]],
        [[1.0, 1.0, 1.0], [0.0, 0.0, 0.0], [-1.0, -1.0, -1.0]],
    ),
    EdgeMethod.SOBEL: (
        [[-1.0, 0.0, 1.0], [-2.0, 0.0, 2.0], [-1.0, 0.0, 1.0]],
        [[-1.0, -2.0, -1.0], [0.0, 0.0, 0.0], [1.0, 2.0, 1.0]],
    ),
    EdgeMethod.SCHARR: (
        [[3.0, 0.0, -3.0], [10.0, 0.0, -10.0], [3.0, 0.0, -3.0]],
        [[3.0, 10.0, 3.0], [0.0, 0.0, 0.0], [-3.0, -10.0, -3.0]],
    ),
}

LAPLACE_KERNEL = [[0.0, 1.0, 0.0], [1.0, -4.0, 1.0], [0.0, 1.0, 0.0]]
MODERN_SHARPEN_KERNEL = [[0.0, -1.0, 0.0], [-1.0, 5.0, -1.0], [0.0, -1.0, 0.0]]


def gradient_filter(
    image: Image,
    derivative_x,
    derivative_y,
    scale: float = 1.0,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REFLECT,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Gradient magnitude: scale * sqrt(Gx^2 + Gy^2).

    Args:
        image: Source image
        derivative_x: Odd-sized kernel for the x derivative
        derivative_y: Kernel for the y derivative, same size as derivative_x
        scale: Multiplier of the magnitude
        extrapolation: Border policy
        scheduler: Scheduler to use, default process-wide
    """
    kernel_x = as_kernel(derivative_x, "derivative_x")
    kernel_y = as_kernel(derivative_y, "derivative_y")
    if kernel_x.shape != kernel_y.shape:
        raise InvalidArgumentError(
            f"Parameter 'derivative_y' {kernel_y.shape} must have same size as "
            f"'derivative_x' {kernel_x.shape}",
            parameter="derivative_y",
        )
    size = Size(width=kernel_x.shape[1], height=kernel_x.shape[0])
    if not size.is_odd:
        raise InvalidArgumentError(
            f"Parameter 'derivative_x' ({size.width}x{size.height}) must have odd size",
            parameter="derivative_x",
        )
    extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")
    scheduler = resolve_scheduler(scheduler)

    gx = convolve(image, kernel_x, size.center, extrapolation, scheduler)
    gy = convolve(image, kernel_y, size.center, extrapolation, scheduler)
    return materialize(image, scale * np.sqrt(gx * gx + gy * gy))


def edge_detection(
    image: Image,
    method: Union[EdgeMethod, str] = EdgeMethod.SOBEL,
    scale: float = 1.0,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REFLECT,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Gradient magnitude with the fixed 3x3 kernels of method."""
    method = parse_enum(method, EdgeMethod, "method")
    logger.debug(f"Edge detection {method.value}, scale {scale}")
    derivative_x, derivative_y = GRADIENT_KERNELS[method]
    return gradient_filter(image, derivative_x, derivative_y, scale, extrapolation, scheduler)


def laplacian(
    image: Image,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Negated discrete Laplace operator; bright where intensity peaks."""
    return linear_filter(
        image, LAPLACE_KERNEL, scale=-1.0, extrapolation=extrapolation, scheduler=scheduler
    )


def sharpen(
    image: Image,
    method: Union[SharpenMethod, str] = SharpenMethod.MODERN,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Sharpen image.

    LAPLACIAN adds the Laplacian response to the image; MODERN convolves with
    the 5-centre cross kernel.
    """
    method = parse_enum(method, SharpenMethod, "method")
    if method == SharpenMethod.LAPLACIAN:
        return arithmetic.add(laplacian(image, extrapolation, scheduler), image)
    return linear_filter(
        image, MODERN_SHARPEN_KERNEL, extrapolation=extrapolation, scheduler=scheduler
    )


def invert(image: Image) -> Image:
    """255 - sample for every channel."""
    return arithmetic.invert(image)
