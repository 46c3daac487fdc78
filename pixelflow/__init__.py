"""
Pixel Flow - pixel buffers, aperture filters and region growing.

The core types are re-exported here; filters live in `pixelflow.vision`.
"""

from pixelflow.core.color import Color
from pixelflow.core.enums import (
    AdaptiveMethod,
    BlurMethod,
    Connectivity,
    EdgeMethod,
    Encoding,
    Extrapolation,
    Interpolation,
    MorphologyOperation,
    RangePolicy,
    SharpenMethod,
    ThresholdType,
)
from pixelflow.core.exceptions import (
    InvalidArgumentError,
    OutOfRangeError,
    PixelFlowError,
    SizeMismatchError,
)
from pixelflow.core.geometry import Point, Rectangle, Size
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import (
    ParallelScheduler,
    get_default_scheduler,
    set_default_scheduler,
)

__version__ = "1.0.0"

__all__ = [
    "Color",
    "Image",
    "Point",
    "Size",
    "Rectangle",
    "Encoding",
    "Extrapolation",
    "Interpolation",
    "Connectivity",
    "RangePolicy",
    "ThresholdType",
    "AdaptiveMethod",
    "EdgeMethod",
    "BlurMethod",
    "SharpenMethod",
    "MorphologyOperation",
    "PixelFlowError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "SizeMismatchError",
    "ParallelScheduler",
    "get_default_scheduler",
    "set_default_scheduler",
]
