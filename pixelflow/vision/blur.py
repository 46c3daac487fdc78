"""
Blur filters: box, Gaussian, median and Kuwahara.
"""

import logging
from typing import Optional, Sequence, Union

import cv2
import numpy as np

from pixelflow.core.constants import FilterConstants
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import BlurMethod, Extrapolation
from pixelflow.core.exceptions import InvalidArgumentError, verify_positive
from pixelflow.core.geometry import Size
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import ParallelScheduler
from pixelflow.vision.aperture import (
    linear_filter,
    nonlinear_filter,
    separable_filter,
    verify_odd_window,
)

logger = logging.getLogger(__name__)

Window = Union[Size, int, Sequence[int]]


def sigma_for_size(size: int) -> float:
    """Gaussian sigma matching a kernel extent (size / 6)."""
    return verify_positive(size, "size") / FilterConstants.SIGMA_SIZE_COEFF


def size_for_sigma(sigma: float) -> int:
    """Odd kernel extent covering a Gaussian of the given sigma."""
    if sigma <= 0:
        raise InvalidArgumentError(
            f"Value of 'sigma' (= {sigma}) must be more than 0", parameter="sigma", value=sigma
        )
    size = int(FilterConstants.SIGMA_SIZE_COEFF * sigma)
    return size if size % 2 == 1 else size + 1


def gaussian_kernel(size: int, sigma: Optional[float] = None) -> np.ndarray:
    """
    Normalized 1-D Gaussian kernel.

    Args:
        size: Odd kernel length
        sigma: Standard deviation, default size / 6

    Returns:
        float64 vector of length size summing to 1
    """
    size = verify_positive(size, "size")
    if size % 2 == 0:
        raise InvalidArgumentError(
            f"Parameter 'size' (= {size}) must be odd (1, 3, 5, ...)", parameter="size", value=size
        )
    sigma = sigma_for_size(size) if sigma is None else sigma
    if sigma <= 0:
        raise InvalidArgumentError(
            f"Value of 'sigma' (= {sigma}) must be more than 0", parameter="sigma", value=sigma
        )
    return cv2.getGaussianKernel(size, sigma, ktype=cv2.CV_64F).ravel()


def box_blur(
    image: Image,
    window: Window = FilterConstants.DEFAULT_BLUR_WINDOW,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Mean of the window."""
    window = verify_odd_window(window)
    kernel = np.ones((window.height, window.width), dtype=np.float64)
    return linear_filter(
        image, kernel, scale=1.0 / window.n, extrapolation=extrapolation, scheduler=scheduler
    )


def gaussian_blur(
    image: Image,
    window: Window = FilterConstants.DEFAULT_BLUR_WINDOW,
    sigma_x: Optional[float] = None,
    sigma_y: Optional[float] = None,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Separable Gaussian blur.

    Args:
        image: Source image
        window: Odd kernel size
        sigma_x, sigma_y: Standard deviations, default extent / 6
        extrapolation: Border policy
        scheduler: Scheduler to use, default process-wide
    """
    window = verify_odd_window(window)
    return separable_filter(
        image,
        gaussian_kernel(window.width, sigma_x),
        gaussian_kernel(window.height, sigma_y),
        extrapolation=extrapolation,
        scheduler=scheduler,
    )


def _lower_median(aperture: Image):
    samples = aperture.as_array().reshape(-1, aperture.channels)
    ordered = np.sort(samples, axis=0)
    return ordered[(ordered.shape[0] - 1) // 2]


def median_blur(
    image: Image,
    window: Window = FilterConstants.DEFAULT_BLUR_WINDOW,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """Median of the window, per channel."""
    window = verify_odd_window(window)
    return nonlinear_filter(
        image, window, _lower_median, extrapolation=extrapolation, scheduler=scheduler
    )


def _kuwahara_operator(window: Size):
    center = window.center
    quadrant_width, quadrant_height = center.x, center.y
    origins = [
        (0, 0),
        (center.x + 1, 0),
        (0, center.y + 1),
        (center.x + 1, center.y + 1),
    ]

    def operator(aperture: Image):
        samples = aperture.as_array()
        quadrants = [
            samples[y : y + quadrant_height, x : x + quadrant_width, :].reshape(
                -1, aperture.channels
            )
            for x, y in origins
        ]
        means = np.stack([q.mean(axis=0) for q in quadrants])
        variances = np.stack([((q - m) ** 2).sum(axis=0) for q, m in zip(quadrants, means)])
        # Per channel, the first quadrant with the lowest variance wins
        best = np.argmin(variances, axis=0)
        return means[best, np.arange(aperture.channels)]

    return operator


def kuwahara_blur(
    image: Image,
    window: Window = 5,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Edge preserving blur: mean of the quadrant with the lowest variance.

    Windows of 3x3 or smaller cannot be split into quadrants; the image is
    returned unchanged (as a copy).
    """
    window = verify_odd_window(window)
    if window.width != window.height:
        raise InvalidArgumentError(
            f"Kuwahara window must be a square, got {window.width}x{window.height}",
            parameter="window",
        )
    if window.n <= FilterConstants.KUWAHARA_MIN_WINDOW_N:
        logger.warning(
            f"Kuwahara window {window.width}x{window.height} is too small to split, "
            f"returning a copy"
        )
        return image.copy()
    return nonlinear_filter(
        image,
        window,
        _kuwahara_operator(window),
        extrapolation=extrapolation,
        scheduler=scheduler,
    )


def blur(
    image: Image,
    window: Window = FilterConstants.DEFAULT_BLUR_WINDOW,
    method: Union[BlurMethod, str] = BlurMethod.BOX,
    extrapolation: Union[Extrapolation, str] = Extrapolation.REPLICATE,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Blur image with the selected method.

    Args:
        image: Source image
        window: Odd window size (int for a square)
        method: BOX, GAUSSIAN, MEDIAN or KUWAHARA
        extrapolation: Border policy
        scheduler: Scheduler to use, default process-wide

    Returns:
        New image with the size, channels and encoding of image
    """
    method = parse_enum(method, BlurMethod, "method")
    logger.debug(f"Blur {method.value} window {window}")

    if method == BlurMethod.BOX:
        return box_blur(image, window, extrapolation, scheduler)
    if method == BlurMethod.GAUSSIAN:
        return gaussian_blur(image, window, extrapolation=extrapolation, scheduler=scheduler)
    if method == BlurMethod.MEDIAN:
        return median_blur(image, window, extrapolation, scheduler)
    return kuwahara_blur(image, window, extrapolation, scheduler)
