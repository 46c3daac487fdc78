"""
Region Growing Engine (flood fill).

Breadth-first traversal from a seed pixel. A neighbour joins the region when
its original colour is within `distance` of the comparison colour:
- FIXED: the seed's original colour
- NEIGHBOR: the original colour of the pixel that reached it (drift allowed)

Accepted pixels are painted immediately; the Region descriptor is built once,
after the frontier is exhausted.
"""

import logging
import math
from collections import deque
from typing import Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from pixelflow.core.color import Color
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import Connectivity, RangePolicy
from pixelflow.core.exceptions import InvalidArgumentError
from pixelflow.core.geometry import Point, Rectangle
from pixelflow.core.image import Image, PointLike

logger = logging.getLogger(__name__)

_OFFSETS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))
_OFFSETS_8 = ((-1, -1), (-1, 1), (1, -1), (1, 1)) + _OFFSETS_4

NEIGHBOR_OFFSETS = {
    Connectivity.FOUR: _OFFSETS_4,
    Connectivity.EIGHT: _OFFSETS_8,
}


class Region(BaseModel):
    """Summary of a filled region."""

    model_config = ConfigDict(frozen=True)

    seed: Point = Field(..., description="Start pixel")
    area: int = Field(..., ge=1, description="Number of filled pixels")
    bounding_rect: Rectangle = Field(..., description="Smallest rectangle holding the region")
    centroid: Point = Field(..., description="Mean pixel position, rounded to the nearest pixel")


def flood_fill(
    image: Image,
    seed: PointLike,
    distance: float,
    fill_color: Color,
    connectivity: Union[Connectivity, int, str] = Connectivity.FOUR,
    range_policy: Union[RangePolicy, str] = RangePolicy.FIXED,
) -> Region:
    """
    Fill the connected region around seed in place.

    Colour distance is the normalized Euclidean distance
    sqrt(sum((a_c - b_c)^2) / channels), i.e. |a - b| for one channel.

    Args:
        image: Image to paint (mutated)
        seed: Start pixel, inside the image
        distance: Maximum colour distance (>= 0) for a pixel to join
        fill_color: Paint colour, same channel count as image
        connectivity: FOUR or EIGHT neighbourhood (or 4 / 8)
        range_policy: FIXED or NEIGHBOR comparison colour

    Returns:
        Region with area, bounding rectangle and centroid

    Raises:
        InvalidArgumentError: Unknown connectivity or range policy, seed
            outside the image, negative distance, channel count mismatch
    """
    connectivity = parse_enum(connectivity, Connectivity, "connectivity")
    range_policy = parse_enum(range_policy, RangePolicy, "range_policy")
    if distance < 0 or math.isnan(distance):
        raise InvalidArgumentError(
            f"Value of 'distance' (= {distance}) must be non-negative",
            parameter="distance",
            value=distance,
        )
    if not isinstance(fill_color, Color) or fill_color.channels != image.channels:
        raise InvalidArgumentError(
            f"Parameter 'fill_color' should have same number of channels as image "
            f"(= {image.channels})",
            parameter="fill_color",
        )
    if isinstance(seed, Point):
        seed_x, seed_y = seed.x, seed.y
    else:
        seed_x, seed_y = seed
    if not (0 <= seed_x < image.width and 0 <= seed_y < image.height):
        raise InvalidArgumentError(
            f"Seed ({seed_x}, {seed_y}) must be inside image {image.width}x{image.height}",
            parameter="seed",
        )

    width, height, channels = image.width, image.height, image.channels
    offsets = NEIGHBOR_OFFSETS[connectivity]
    encoded_fill = image.encode(fill_color.to_array())
    threshold_sq = float(distance) ** 2 * channels

    pixels = image.as_array()
    original = pixels.astype(np.float64)
    visited = np.zeros((height, width), dtype=bool)
    seed_color = original[seed_y, seed_x]

    visited[seed_y, seed_x] = True
    pixels[seed_y, seed_x, :] = encoded_fill
    area = 1
    min_x = max_x = sum_x = seed_x
    min_y = max_y = sum_y = seed_y

    frontier = deque([(seed_x, seed_y)])
    while frontier:
        x, y = frontier.popleft()
        reference = seed_color if range_policy == RangePolicy.FIXED else original[y, x]

        for dx, dy in offsets:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height) or visited[ny, nx]:
                continue
            diff = original[ny, nx] - reference
            # Squared form of sqrt(sum(diff^2) / channels) <= distance
            if float(np.dot(diff, diff)) > threshold_sq:
                continue

            visited[ny, nx] = True
            pixels[ny, nx, :] = encoded_fill
            frontier.append((nx, ny))

            area += 1
            min_x, max_x = min(min_x, nx), max(max_x, nx)
            min_y, max_y = min(min_y, ny), max(max_y, ny)
            sum_x += nx
            sum_y += ny

    region = Region(
        seed=Point(x=seed_x, y=seed_y),
        area=area,
        bounding_rect=Rectangle.from_points(min_x, min_y, max_x + 1, max_y + 1),
        centroid=Point(x=math.floor(sum_x / area + 0.5), y=math.floor(sum_y / area + 0.5)),
    )
    logger.debug(
        f"Flood fill from ({seed_x}, {seed_y}): {area} pixel(s), "
        f"bounding {region.bounding_rect.to_dict()}"
    )
    return region
