"""
Geometry models: Point, Size and Rectangle.

Pydantic models with non-negative integer fields, used to address pixels and
sub-regions of an Image.
"""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Point(BaseModel):
    """Pixel coordinate (x to the right, y downwards)."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0, description="X coordinate")
    y: int = Field(..., ge=0, description="Y coordinate")

    @classmethod
    def of(cls, value: Any) -> "Point":
        """Create a Point from a Point, an (x, y) tuple or a dict."""
        if isinstance(value, Point):
            return value
        if isinstance(value, dict):
            return cls(**value)
        x, y = value
        return cls(x=int(x), y=int(y))

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


class Size(BaseModel):
    """Width and height of an image or window."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., ge=0, description="Width")
    height: int = Field(..., ge=0, description="Height")

    @classmethod
    def of(cls, value: Any) -> "Size":
        """Create a Size from a Size, an int (square), a (width, height) tuple or a dict."""
        if isinstance(value, Size):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if isinstance(value, int):
            return cls(width=value, height=value)
        width, height = value
        return cls(width=int(width), height=int(height))

    @property
    def n(self) -> int:
        """Number of elements (width x height)."""
        return self.width * self.height

    @property
    def center(self) -> Point:
        """Central point; for even extents the right/lower of the two middles."""
        return Point(x=self.width // 2, y=self.height // 2)

    @property
    def is_odd(self) -> bool:
        return self.width % 2 == 1 and self.height % 2 == 1

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)


class Rectangle(BaseModel):
    """
    Axis aligned rectangle.

    Represents a rectangular region of an image with the utility methods
    needed for sub-image addressing and region descriptors.
    """

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0, description="X coordinate of the top-left corner")
    y: int = Field(..., ge=0, description="Y coordinate of the top-left corner")
    width: int = Field(..., ge=0, description="Width")
    height: int = Field(..., ge=0, description="Height")

    @classmethod
    def from_point_size(cls, point: Point, size: Size) -> "Rectangle":
        """Create Rectangle from its top-left corner and size."""
        return cls(x=point.x, y=point.y, width=size.width, height=size.height)

    @classmethod
    def from_points(cls, x1: int, y1: int, x2: int, y2: int) -> "Rectangle":
        """Create Rectangle spanning two corner points (exclusive far corner)."""
        return cls(x=min(x1, x2), y=min(y1, y2), width=abs(x2 - x1), height=abs(y2 - y1))

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @property
    def x2(self) -> int:
        """Get right edge coordinate (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Get bottom edge coordinate (exclusive)."""
        return self.y + self.height

    @property
    def origin(self) -> Point:
        return Point(x=self.x, y=self.y)

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def area(self) -> int:
        """Get area of rectangle in pixels."""
        return self.width * self.height

    def contains_point(self, x: int, y: int) -> bool:
        """Check if point is inside rectangle."""
        return self.x <= x < self.x2 and self.y <= y < self.y2

    def contains(self, other: "Rectangle") -> bool:
        """Check if other rectangle lies fully inside this one."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.x2 <= self.x2
            and other.y2 <= self.y2
        )

    def intersects(self, other: "Rectangle") -> bool:
        """Check if this rectangle intersects with another."""
        return not (
            self.x2 <= other.x or other.x2 <= self.x or self.y2 <= other.y or other.y2 <= self.y
        )
