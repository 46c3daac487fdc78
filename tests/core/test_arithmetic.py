"""
Tests for per-sample image arithmetic
"""

import numpy as np
import pytest

from pixelflow.core import arithmetic
from pixelflow.core.color import Color
from pixelflow.core.enums import Encoding
from pixelflow.core.exceptions import SizeMismatchError
from pixelflow.core.image import Image


@pytest.fixture
def first():
    return Image.from_array(np.array([[10, 200], [50, 0]], dtype=np.uint8))


@pytest.fixture
def second():
    return Image.from_array(np.array([[20, 100], [50, 5]], dtype=np.uint8))


class TestArithmetic:
    """Test add, subtract, abs_diff, multiply and invert"""

    def test_add_clamps(self, first, second):
        """Narrow sums clamp at 255"""
        assert arithmetic.add(first, second).to_array()[:, :, 0].tolist() == [[30, 255], [100, 5]]

    def test_subtract_clamps(self, first, second):
        """Narrow differences clamp at 0"""
        result = arithmetic.subtract(first, second)
        assert result.to_array()[:, :, 0].tolist() == [[0, 100], [0, 0]]

    def test_abs_diff(self, first, second):
        """Absolute difference"""
        result = arithmetic.abs_diff(first, second)
        assert result.to_array()[:, :, 0].tolist() == [[10, 100], [0, 5]]

    def test_scalar_multiply(self, first):
        """Scalar factor, rounded half up"""
        result = arithmetic.multiply(first, 0.25)
        assert result.to_array()[:, :, 0].tolist() == [[3, 50], [13, 0]]

    def test_wide_keeps_negative(self, first, second):
        """Wide results are not clamped"""
        wide = Image.from_array(first.as_array(), Encoding.WIDE)
        result = arithmetic.subtract(wide, second)
        assert result.is_wide
        assert result.get(0, 0) == -10.0

    def test_invert(self, first):
        """invert maps v to 255 - v"""
        assert arithmetic.invert(first).to_array()[:, :, 0].tolist() == [[245, 55], [205, 255]]

    def test_mean_color(self, first):
        """Mean over the whole image"""
        assert arithmetic.mean_color(first) == Color([65.0])

    def test_geometry_mismatch(self, first):
        """Operands must share geometry"""
        with pytest.raises(SizeMismatchError):
            arithmetic.add(first, Image(3, 2))

    def test_inputs_untouched(self, first, second):
        """Inputs are never mutated"""
        before = first.copy()
        arithmetic.add(first, second)
        assert first == before


class TestIntegralImage:
    """Test the normalized summed-area table"""

    def test_small_values(self):
        """Each sample is the inclusive prefix sum divided by N"""
        image = Image.from_array(np.array([[1, 2, 3], [4, 5, 6]], dtype=np.uint8))
        result = arithmetic.integral_image(image)
        assert result.encoding == Encoding.WIDE
        sums = result.to_array(np.float64)[:, :, 0] * 6
        assert np.allclose(sums, [[1, 3, 6], [5, 12, 21]])

    def test_constant_image(self, parallel_scheduler):
        """A constant image sums to (x + 1) * (y + 1) * value"""
        image = Image(30, 20, 3, Encoding.WIDE, fill_color=Color([255, 255, 255]))
        result = arithmetic.integral_image(image, scheduler=parallel_scheduler)
        raw = result.as_array() * image.size.n
        ys, xs = np.mgrid[0:20, 0:30]
        expected = (xs + 1) * (ys + 1) * 255.0
        for channel in range(3):
            assert np.allclose(raw[:, :, channel], expected)

    def test_subimage_source(self):
        """Sub-images are summed over their own rectangle"""
        parent = Image.from_array(np.arange(16, dtype=np.uint8).reshape(4, 4))
        result = arithmetic.integral_image(parent.get_subimage((1, 1, 2, 2)))
        assert result.get(1, 1) * 4 == pytest.approx(5 + 6 + 9 + 10)
