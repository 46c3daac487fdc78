"""
Constants and configuration values for Pixel Flow.
Centralizes all magic numbers used by the image model and the filters.
"""


# Color Constants
class ColorConstants:
    """Constants related to channel intensities."""

    # Nominal intensity range shared by both encodings
    MIN_VALUE = 0.0
    MAX_VALUE = 255.0

    # Narrow (8-bit) storage limits
    NARROW_MIN = 0
    NARROW_MAX = 255


# Precision Constants
class PrecisionConstants:
    """Tolerances for comparing floating-point samples."""

    # Used for wide-encoded samples and Color equality
    EPSILON = 1e-13


# Parallel Constants
class ParallelConstants:
    """Constants for the row/channel scheduler."""

    # Images smaller than 100 x 100 elements run sequentially
    MIN_WORK_SIZE_DEFAULT = 100 * 100
    MIN_WORK_SIZE_MIN = 1

    # Used when the hardware parallelism cannot be detected
    FALLBACK_WORKER_COUNT = 1

    THREAD_NAME_PREFIX = "pixelflow"


# Filter Constants
class FilterConstants:
    """Constants for aperture based filters."""

    # Gaussian kernels: sigma = kernel_size / SIGMA_SIZE_COEFF
    SIGMA_SIZE_COEFF = 6.0

    # Kuwahara needs at least a 5 x 5 window to split into quadrants
    KUWAHARA_MIN_WINDOW_N = 9

    DEFAULT_MORPHOLOGY_WINDOW = 3
    DEFAULT_BLUR_WINDOW = 3
    DEFAULT_ADAPTIVE_BLOCK_SIZE = 3

    # Otsu threshold histogram
    HISTOGRAM_BINS = 256
