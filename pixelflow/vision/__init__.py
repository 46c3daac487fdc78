"""
Image filters - modular architecture.

This package provides the aperture based algorithms:
- border: extrapolation of samples outside the image
- aperture: linear (convolution) and non-linear window filters
- morphology: erode, dilate and their compositions
- blur: box, Gaussian, median and Kuwahara
- threshold: fixed, adaptive and Otsu
- edge_detection: gradient detectors, Laplacian, sharpen
- flood_fill: region growing

Functions named like their module (`blur.blur`, `threshold.threshold`,
`edge_detection.edge_detection`, `flood_fill.flood_fill`) are imported from
the module itself so the package attributes stay bound to the submodules.
"""

from pixelflow.vision.aperture import linear_filter, nonlinear_filter, separable_filter
from pixelflow.vision.blur import gaussian_blur, gaussian_kernel, median_blur
from pixelflow.vision.edge_detection import laplacian, sharpen
from pixelflow.vision.flood_fill import Region
from pixelflow.vision.morphology import apply_morphology, close, dilate, erode, open_
from pixelflow.vision.threshold import adaptive_threshold, otsu_threshold

__all__ = [
    "linear_filter",
    "separable_filter",
    "nonlinear_filter",
    "erode",
    "dilate",
    "open_",
    "close",
    "apply_morphology",
    "gaussian_blur",
    "median_blur",
    "gaussian_kernel",
    "adaptive_threshold",
    "otsu_threshold",
    "laplacian",
    "sharpen",
    "Region",
]
