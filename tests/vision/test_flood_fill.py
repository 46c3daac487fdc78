"""
Tests for flood fill region growing
"""

import numpy as np
import pytest
from pydantic import ValidationError

from pixelflow.core.color import Color
from pixelflow.core.enums import Connectivity, Encoding, RangePolicy
from pixelflow.core.exceptions import InvalidArgumentError
from pixelflow.core.geometry import Point, Rectangle
from pixelflow.core.image import Image
from pixelflow.vision.flood_fill import Region, flood_fill

FILL = Color([100])


@pytest.fixture
def islands_5x3():
    """
    5x3 ramp with a few values lowered so that some pixels connect only diagonally:

      0  1  2  3  5
      5  2  7  8  3
     10 11  3 13 14
    """
    array = np.arange(15, dtype=np.uint8).reshape(3, 5)
    array[1, 1] = 2
    array[2, 2] = 3
    array[0, 4] = 5
    array[1, 4] = 3
    return Image.from_array(array)


class TestFloodFill:
    """Test region growing on the 5x3 ramp"""

    def test_fixed_four_connected(self, ramp_5x3):
        """Only pixels within distance of the seed and reachable are filled"""
        region = flood_fill(ramp_5x3, (0, 0), 3, FILL, connectivity=Connectivity.FOUR)

        assert region.seed == Point(x=0, y=0)
        assert region.area == 4
        assert region.bounding_rect == Rectangle(x=0, y=0, width=4, height=1)
        # mean x = 1.5 rounds half up
        assert region.centroid == Point(x=2, y=0)

        array = ramp_5x3.to_array()[:, :, 0]
        assert array[0].tolist() == [100, 100, 100, 100, 4]
        assert array[1].tolist() == [5, 6, 7, 8, 3]

    def test_eight_connected_reaches_diagonal(self, ramp_5x3):
        """Diagonal neighbours join with 8-connectivity"""
        region = flood_fill(ramp_5x3, Point(x=0, y=0), 3, FILL, connectivity=8)
        assert region.area == 5
        assert region.bounding_rect == Rectangle(x=0, y=0, width=5, height=2)
        assert ramp_5x3.get(4, 1) == 100

    def test_neighbor_policy_drifts(self, ramp_5x3):
        """NEIGHBOR compares with the accepting pixel, so gradual ramps are followed"""
        fixed = flood_fill(ramp_5x3.copy(), (0, 0), 1, FILL)
        drifting = flood_fill(ramp_5x3, (0, 0), 1, FILL, range_policy=RangePolicy.NEIGHBOR)
        assert fixed.area == 2
        assert drifting.area == 6
        assert ramp_5x3.to_array()[0, :, 0].tolist() == [100] * 5

    def test_zero_distance(self, ramp_5x3):
        """Distance 0 fills only identical colours"""
        region = flood_fill(ramp_5x3, (2, 2), 0, FILL)
        assert region.area == 1
        assert region.bounding_rect == Rectangle(x=2, y=2, width=1, height=1)
        assert region.centroid == Point(x=2, y=2)

    def test_deterministic(self, ramp_5x3):
        """Repeated fills of the same input give identical results"""
        first, second = ramp_5x3.copy(), ramp_5x3.copy()
        assert flood_fill(first, (1, 1), 4, FILL) == flood_fill(second, (1, 1), 4, FILL)
        assert first == second

    def test_subimage_fill(self):
        """Filling a sub-image paints the parent and reports local coordinates"""
        parent = Image(6, 6)
        view = parent.get_subimage((2, 2, 3, 3))
        region = flood_fill(view, (1, 1), 0, Color([9]))
        assert region.area == 9
        assert region.bounding_rect == Rectangle(x=0, y=0, width=3, height=3)
        assert parent.as_array()[:, :, 0].sum() == 81
        assert parent.get(1, 1) == 0

    def test_region_is_frozen(self, ramp_5x3):
        """Region descriptors are immutable"""
        region = flood_fill(ramp_5x3, (0, 0), 0, FILL)
        assert isinstance(region, Region)
        with pytest.raises(ValidationError):
            region.area = 10


class TestRangePolicies:
    """Test both range policies with both neighbourhoods"""

    @pytest.mark.parametrize(
        "distance, range_policy, connectivity, area",
        [
            (3, RangePolicy.FIXED, Connectivity.FOUR, 5),
            (3, RangePolicy.FIXED, Connectivity.EIGHT, 7),
            (1, RangePolicy.NEIGHBOR, Connectivity.FOUR, 5),
            (1, RangePolicy.NEIGHBOR, Connectivity.EIGHT, 7),
        ],
    )
    def test_areas(self, islands_5x3, distance, range_policy, connectivity, area):
        """Diagonal-only pixels join with 8-connectivity under either policy"""
        region = flood_fill(
            islands_5x3.copy(),
            (0, 0),
            distance,
            Color([255]),
            connectivity=connectivity,
            range_policy=range_policy,
        )
        assert region.area == area

    def test_eight_connected_painting(self, islands_5x3):
        """Pixels reached through diagonals are painted"""
        flood_fill(islands_5x3, (0, 0), 3, Color([255]), connectivity=Connectivity.EIGHT)
        array = islands_5x3.to_array()[:, :, 0]
        assert array[1, 4] == 255
        assert array[2, 2] == 255
        assert array[0, 4] == 5


class TestMultiChannel:
    """Test colour distance across channels"""

    def test_normalized_distance(self):
        """Distance is sqrt(sum(diff^2) / channels)"""
        array = np.zeros((1, 3, 2), dtype=np.uint8)
        array[0, 1] = (4, 4)  # distance 4 from the seed
        array[0, 2] = (4, 6)  # sqrt(26) ~ 5.1 from the seed
        image = Image.from_array(array)
        region = flood_fill(image, (0, 0), 4, Color([255, 255]))
        assert region.area == 2
        assert image.get_color((2, 0)) == Color([4, 6])

    def test_wide_fill_keeps_fraction(self):
        """Wide images store the fill colour unrounded"""
        image = Image(3, 1, 1, encoding=Encoding.WIDE)
        flood_fill(image, (0, 0), 0, Color([0.25]))
        assert image.as_array()[0, :, 0].tolist() == [0.25, 0.25, 0.25]


class TestErrors:
    """Test argument validation"""

    def test_bad_connectivity(self, ramp_5x3):
        with pytest.raises(InvalidArgumentError):
            flood_fill(ramp_5x3, (0, 0), 1, FILL, connectivity=6)

    def test_bad_policy(self, ramp_5x3):
        with pytest.raises(InvalidArgumentError):
            flood_fill(ramp_5x3, (0, 0), 1, FILL, range_policy="floating")

    @pytest.mark.parametrize("seed", [(-1, 0), (5, 0), (0, 3)])
    def test_seed_outside(self, ramp_5x3, seed):
        with pytest.raises(InvalidArgumentError):
            flood_fill(ramp_5x3, seed, 1, FILL)

    @pytest.mark.parametrize("distance", [-0.5, float("nan")])
    def test_bad_distance(self, ramp_5x3, distance):
        with pytest.raises(InvalidArgumentError):
            flood_fill(ramp_5x3, (0, 0), distance, FILL)

    def test_channel_mismatch(self, ramp_5x3):
        with pytest.raises(InvalidArgumentError):
            flood_fill(ramp_5x3, (0, 0), 1, Color([1, 2, 3]))

    def test_failed_validation_leaves_image(self, ramp_5x3):
        """Invalid calls do not paint anything"""
        before = ramp_5x3.copy()
        with pytest.raises(InvalidArgumentError):
            flood_fill(ramp_5x3, (0, 0), 1, FILL, connectivity=3)
        assert ramp_5x3 == before
