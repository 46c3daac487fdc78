"""
Thresholding: fixed, adaptive and Otsu.

Every variant compares a sample with a threshold; samples `<= threshold`
take the lower branch:

| type        | val <= threshold | val > threshold |
| ----------- | ---------------- | --------------- |
| BINARY      | 0                | max_value       |
| BINARY_INV  | max_value        | 0               |
| TRUNC       | val              | threshold       |
| TO_ZERO     | 0                | val             |
| TO_ZERO_INV | val              | 0               |
"""

import logging
from typing import Optional, Union

import numpy as np

from pixelflow.core.constants import ColorConstants, FilterConstants
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import AdaptiveMethod, Extrapolation, ThresholdType
from pixelflow.core.exceptions import InvalidArgumentError
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import ParallelScheduler
from pixelflow.vision.aperture import nonlinear_filter, verify_odd_window
from pixelflow.vision.blur import gaussian_kernel

logger = logging.getLogger(__name__)


def _verify_intensity(value: float, name: str) -> float:
    value = float(value)
    if not ColorConstants.MIN_VALUE <= value <= ColorConstants.MAX_VALUE:
        raise InvalidArgumentError(
            f"Parameter '{name}' (= {value}) should be in interval "
            f"[{ColorConstants.MIN_VALUE}, {ColorConstants.MAX_VALUE}]",
            parameter=name,
            value=value,
        )
    return value


def apply_threshold(values, threshold, max_value: float, threshold_type: ThresholdType):
    """
    Apply a threshold variant sample-wise.

    Args:
        values: Sample or array of samples
        threshold: Threshold, scalar or broadcastable to values
        max_value: Value of the "on" branch for binary variants
        threshold_type: Variant to apply

    Returns:
        float64 array with the shape of values
    """
    values = np.asarray(values, dtype=np.float64)
    lower = values <= threshold
    zero = ColorConstants.MIN_VALUE

    if threshold_type == ThresholdType.BINARY:
        return np.where(lower, zero, max_value)
    if threshold_type == ThresholdType.BINARY_INV:
        return np.where(lower, max_value, zero)
    if threshold_type == ThresholdType.TRUNC:
        return np.where(lower, values, threshold)
    if threshold_type == ThresholdType.TO_ZERO:
        return np.where(lower, zero, values)
    return np.where(lower, values, zero)


def threshold(
    image: Image,
    threshold_value: float,
    max_value: float = ColorConstants.MAX_VALUE,
    threshold_type: Union[ThresholdType, str] = ThresholdType.BINARY,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Fixed threshold over every sample.

    Args:
        image: Source image
        threshold_value: Threshold in [0, 255]
        max_value: "On" value in [0, 255] for binary variants
        threshold_type: One of the five ThresholdType variants
        scheduler: Scheduler to use, default process-wide

    Returns:
        New image with the size, channels and encoding of image
    """
    threshold_value = _verify_intensity(threshold_value, "threshold_value")
    max_value = _verify_intensity(max_value, "max_value")
    threshold_type = parse_enum(threshold_type, ThresholdType, "threshold_type")
    logger.debug(f"Threshold {threshold_type.value} at {threshold_value} (max {max_value})")

    def operator(aperture: Image):
        sample = aperture.as_array()[0, 0, :]
        return apply_threshold(sample, threshold_value, max_value, threshold_type)

    return nonlinear_filter(image, 1, operator, scheduler=scheduler)


def adaptive_threshold(
    image: Image,
    max_value: float = ColorConstants.MAX_VALUE,
    method: Union[AdaptiveMethod, str] = AdaptiveMethod.MEAN,
    block_size: int = FilterConstants.DEFAULT_ADAPTIVE_BLOCK_SIZE,
    c: float = 0.0,
    scheduler: Optional[ParallelScheduler] = None,
) -> Image:
    """
    Threshold each sample against its locally weighted neighbourhood.

    The threshold of a pixel is the weighted sum of its block minus c,
    clamped to [0, 255]. MEAN weights every sample by 1 / (block_size^2 - 1);
    GAUSSIAN uses the outer product of a normalized Gaussian kernel. The
    _INV variants produce BINARY_INV output. Borders are replicated.

    Args:
        image: Source image
        max_value: "On" value in [0, 255]
        method: MEAN, MEAN_INV, GAUSSIAN or GAUSSIAN_INV
        block_size: Odd block size
        c: Constant subtracted from the weighted sum, in [0, 255]
        scheduler: Scheduler to use, default process-wide
    """
    max_value = _verify_intensity(max_value, "max_value")
    c = _verify_intensity(c, "c")
    method = parse_enum(method, AdaptiveMethod, "method")
    window = verify_odd_window(block_size, "block_size")
    if window.n == 1:
        raise InvalidArgumentError(
            "Parameter 'block_size' must be at least 3", parameter="block_size", value=block_size
        )

    if method in (AdaptiveMethod.MEAN, AdaptiveMethod.MEAN_INV):
        weights = np.full((window.height, window.width), 1.0 / (window.n - 1))
    else:
        kernel = gaussian_kernel(window.width)
        weights = np.outer(kernel, kernel)

    threshold_type = (
        ThresholdType.BINARY
        if method in (AdaptiveMethod.MEAN, AdaptiveMethod.GAUSSIAN)
        else ThresholdType.BINARY_INV
    )
    center = window.center
    logger.debug(f"Adaptive threshold {method.value}, block {window.width}, c={c}")

    def operator(aperture: Image):
        samples = aperture.as_array()
        weighted = np.tensordot(weights, samples, axes=([0, 1], [0, 1]))
        local = np.clip(weighted - c, ColorConstants.MIN_VALUE, ColorConstants.MAX_VALUE)
        return apply_threshold(samples[center.y, center.x, :], local, max_value, threshold_type)

    return nonlinear_filter(
        image, window, operator, extrapolation=Extrapolation.REPLICATE, scheduler=scheduler
    )


def otsu_threshold(image: Image) -> float:
    """
    Threshold maximizing the between-class variance of the sample histogram.

    Samples of every channel are rounded to integers in [0, 255] and share one
    histogram.

    Returns:
        Threshold t; samples <= t form the lower class
    """
    samples = image.to_array(np.uint8).ravel()
    histogram = np.bincount(samples, minlength=FilterConstants.HISTOGRAM_BINS).astype(np.float64)
    total = histogram.sum()
    levels = np.arange(FilterConstants.HISTOGRAM_BINS, dtype=np.float64)

    weight_low = np.cumsum(histogram)
    weight_high = total - weight_low
    sum_low = np.cumsum(histogram * levels)
    sum_all = sum_low[-1]

    with np.errstate(divide="ignore", invalid="ignore"):
        mean_low = sum_low / weight_low
        mean_high = (sum_all - sum_low) / weight_high
        between = weight_low * weight_high * (mean_low - mean_high) ** 2
    between = np.nan_to_num(between, nan=0.0, posinf=0.0)

    best = float(np.argmax(between))
    logger.debug(f"Otsu threshold: {best}")
    return best
