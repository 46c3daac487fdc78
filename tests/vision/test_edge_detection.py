"""
Tests for edge detection, Laplacian and sharpening
"""

import numpy as np
import pytest

from pixelflow.core.enums import EdgeMethod, SharpenMethod
from pixelflow.core.exceptions import InvalidArgumentError
from pixelflow.core.image import Image
from pixelflow.vision.edge_detection import (
    edge_detection,
    gradient_filter,
    invert,
    laplacian,
    sharpen,
)


@pytest.fixture
def flat():
    """Constant 3-channel image"""
    return Image.from_array(np.full((6, 7, 3), 80, dtype=np.uint8))


@pytest.fixture
def vertical_step():
    """8x5 image: columns 0..3 are 0, columns 4..7 are 100"""
    array = np.zeros((5, 8), dtype=np.uint8)
    array[:, 4:] = 100
    return Image.from_array(array)


class TestEdgeDetection:
    """Test gradient magnitude detectors"""

    @pytest.mark.parametrize("method", list(EdgeMethod))
    def test_flat_has_no_edges(self, flat, method):
        """Constant images have zero gradient everywhere"""
        assert np.all(edge_detection(flat, method).to_array() == 0)

    def test_sobel_step(self, vertical_step):
        """Sobel responds on both sides of the step only"""
        result = edge_detection(vertical_step, EdgeMethod.SOBEL, scale=0.25)
        row = result.to_array()[2, :, 0].tolist()
        assert row == [0, 0, 0, 100, 100, 0, 0, 0]

    @pytest.mark.parametrize("method", ["prewitt", "scharr", "roberts"])
    def test_step_detected(self, vertical_step, method):
        """Every detector marks the step"""
        result = edge_detection(vertical_step, method).to_array()[:, :, 0]
        assert result[:, 3:5].max() > 0
        assert np.all(result[:, 0:2] == 0)

    def test_unknown_method(self, flat):
        """Unknown methods are rejected"""
        with pytest.raises(InvalidArgumentError):
            edge_detection(flat, "canny")

    def test_mismatched_kernels(self, flat):
        """Derivative kernels must have the same size"""
        with pytest.raises(InvalidArgumentError):
            gradient_filter(flat, np.ones((3, 3)), np.ones((5, 5)))

    def test_even_kernels(self, flat):
        """Derivative kernels must have odd size"""
        with pytest.raises(InvalidArgumentError):
            gradient_filter(flat, np.ones((2, 2)), np.ones((2, 2)))


class TestLaplacianAndSharpen:
    """Test second derivative based filters"""

    def test_laplacian_flat(self, flat):
        """The Laplacian of a constant image is zero"""
        assert np.all(laplacian(flat).to_array() == 0)

    def test_laplacian_peak(self):
        """Peaks are bright, their neighbours clamp at zero"""
        array = np.zeros((5, 5), dtype=np.uint8)
        array[2, 2] = 50
        result = laplacian(Image.from_array(array)).to_array()[:, :, 0]
        assert result[2, 2] == 200
        assert result[2, 1] == 0

    @pytest.mark.parametrize("method", list(SharpenMethod))
    def test_sharpen_flat(self, flat, method):
        """Sharpening leaves constant images unchanged"""
        assert sharpen(flat, method) == flat

    def test_sharpen_boosts_peak(self):
        """Sharpening increases local contrast"""
        array = np.full((5, 5), 100, dtype=np.uint8)
        array[2, 2] = 120
        result = sharpen(Image.from_array(array), SharpenMethod.MODERN).to_array()[:, :, 0]
        assert result[2, 2] == 200
        assert result[2, 1] == 80


class TestInvert:
    """Test inversion"""

    def test_invert(self):
        """Samples become 255 - value"""
        image = Image.from_array(np.array([[0, 55, 255]], dtype=np.uint8))
        assert invert(image).to_array()[0, :, 0].tolist() == [255, 200, 0]

    def test_twice_is_identity(self, test_image):
        """Inverting twice restores the image"""
        assert invert(invert(test_image)) == test_image
