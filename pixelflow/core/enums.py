"""
Centralized enums for Pixel Flow.

All mode parameters accepted by the image model and the filters live here so
they can be re-exported from a single place.
"""

from enum import Enum, IntEnum


class Encoding(str, Enum):
    """Numeric encoding of pixel storage."""

    NARROW = "narrow"  # 8-bit unsigned integer, 0..255
    WIDE = "wide"  # 64-bit float, unclamped


class Extrapolation(str, Enum):
    """Border policy for reads outside the image."""

    ZERO = "zero"
    REPLICATE = "replicate"
    REFLECT = "reflect"
    WRAP = "wrap"


class Interpolation(str, Enum):
    """Sub-pixel sampling methods."""

    NEAREST_NEIGHBOR = "nearest_neighbor"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"


class Connectivity(IntEnum):
    """Pixel neighborhood used by region growing."""

    FOUR = 4
    EIGHT = 8


class RangePolicy(str, Enum):
    """Color reference used when flood fill accepts a candidate."""

    FIXED = "fixed"  # compare with the seed's original color
    NEIGHBOR = "neighbor"  # compare with the accepting neighbor's original color


class ThresholdType(str, Enum):
    """Fixed threshold variants."""

    BINARY = "binary"
    BINARY_INV = "binary_inv"
    TRUNC = "trunc"
    TO_ZERO = "to_zero"
    TO_ZERO_INV = "to_zero_inv"


class AdaptiveMethod(str, Enum):
    """Adaptive threshold variants."""

    MEAN = "mean"
    MEAN_INV = "mean_inv"
    GAUSSIAN = "gaussian"
    GAUSSIAN_INV = "gaussian_inv"


class EdgeMethod(str, Enum):
    """Gradient based edge detectors."""

    ROBERTS = "roberts"
    PREWITT = "prewitt"
    SOBEL = "sobel"
    SCHARR = "scharr"


class BlurMethod(str, Enum):
    """Smoothing filters."""

    BOX = "box"
    GAUSSIAN = "gaussian"
    MEDIAN = "median"
    KUWAHARA = "kuwahara"


class SharpenMethod(str, Enum):
    """Sharpening kernels."""

    LAPLACIAN = "laplacian"
    MODERN = "modern"


class MorphologyOperation(str, Enum):
    """Morphological operations."""

    DILATE = "dilate"
    ERODE = "erode"
    OPEN = "open"
    CLOSE = "close"
    GRADIENT = "gradient"
    WHITE_TOP_HAT = "white_top_hat"
    BLACK_TOP_HAT = "black_top_hat"
