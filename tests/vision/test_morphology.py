"""
Tests for morphological operations
"""

import numpy as np
import pytest

from pixelflow.core.enums import MorphologyOperation
from pixelflow.core.exceptions import InvalidArgumentError
from pixelflow.core.image import Image
from pixelflow.vision import morphology as morph


@pytest.fixture
def spot():
    """7x7 image with a single bright pixel in the centre"""
    array = np.zeros((7, 7), dtype=np.uint8)
    array[3, 3] = 200
    return Image.from_array(array)


class TestErodeDilate:
    """Test windowed min and max"""

    def test_dilate_grows(self, spot):
        """Dilation spreads the spot over the window"""
        result = morph.dilate(spot, 3)
        block = result.to_array()[:, :, 0]
        assert np.all(block[2:5, 2:5] == 200)
        assert block.sum() == 9 * 200

    def test_dilate_iterations(self, spot):
        """Two passes grow by two pixels"""
        result = morph.dilate(spot, 3, iterations=2)
        assert result.to_array()[:, :, 0].sum() == 25 * 200

    def test_erode_removes_spot(self, spot):
        """Erosion removes details smaller than the window"""
        result = morph.erode(spot, 3)
        assert np.all(result.to_array() == 0)

    def test_non_square_window(self, spot):
        """Windows may differ in width and height"""
        result = morph.dilate(spot, (5, 1))
        assert result.to_array()[3, :, 0].tolist() == [0, 200, 200, 200, 200, 200, 0]
        assert result.to_array()[2, :, 0].sum() == 0

    def test_multi_channel_independent(self):
        """Channels are processed independently"""
        array = np.zeros((3, 3, 2), dtype=np.uint8)
        array[0, 0, 0] = 10
        array[2, 2, 1] = 20
        result = morph.dilate(Image.from_array(array), 3)
        assert result.get_color((1, 1)).values == (10.0, 20.0)

    def test_even_window_rejected(self, spot):
        """Structuring windows must be odd"""
        with pytest.raises(InvalidArgumentError):
            morph.erode(spot, 4)

    def test_zero_iterations(self, spot):
        """At least one iteration is required"""
        with pytest.raises(InvalidArgumentError):
            morph.dilate(spot, 3, iterations=0)


class TestCompositions:
    """Test open/close and derived operations"""

    @pytest.mark.parametrize("window", [1, 3, (3, 5), 5])
    @pytest.mark.parametrize("iterations", [1, 2])
    def test_open_duality(self, gray_image, window, iterations):
        """open(X) == dilate(erode(X))"""
        expected = morph.dilate(morph.erode(gray_image, window, iterations), window, iterations)
        assert morph.open_(gray_image, window, iterations) == expected

    @pytest.mark.parametrize("window", [1, 3, (5, 3)])
    @pytest.mark.parametrize("iterations", [1, 3])
    def test_close_duality(self, test_image, window, iterations):
        """close(X) == erode(dilate(X))"""
        expected = morph.erode(morph.dilate(test_image, window, iterations), window, iterations)
        assert morph.close(test_image, window, iterations) == expected

    def test_open_removes_spot(self, spot):
        """Opening removes a spot smaller than the window"""
        assert np.all(morph.open_(spot, 3).to_array() == 0)

    def test_gradient(self, spot):
        """Gradient outlines the dilated spot"""
        result = morph.gradient(spot, 3).to_array()[:, :, 0]
        assert result[3, 3] == 200
        assert result[2, 2] == 200
        assert result[0, 0] == 0

    def test_top_hats(self, spot):
        """White top-hat keeps the spot, black top-hat of a bright spot is empty"""
        assert morph.white_top_hat(spot, 3) == spot
        assert np.all(morph.black_top_hat(spot, 3).to_array() == 0)

    def test_dispatcher(self, spot):
        """apply_morphology() selects the operation by name"""
        assert morph.apply_morphology(spot, 3, "dilate") == morph.dilate(spot, 3)
        assert morph.apply_morphology(spot, 3, MorphologyOperation.CLOSE) == morph.close(spot, 3)

    def test_dispatcher_unknown(self, spot):
        """Unknown operations are rejected"""
        with pytest.raises(InvalidArgumentError):
            morph.apply_morphology(spot, 3, "skeleton")
