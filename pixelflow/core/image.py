"""
Image - a logical view over a Pixel Storage region.

An Image is a rectangle (offset + size) and a channel window over a shared
storage buffer. Sub-images and channel views alias the storage of the image
they were taken from: a write through one is visible through the other
wherever they overlap. `copy()` allocates independent storage.
"""

import logging
import math
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image as PILImage

from pixelflow.core.color import Color
from pixelflow.core.constants import ColorConstants, PrecisionConstants
from pixelflow.core.enum_converter import parse_enum
from pixelflow.core.enums import Encoding, Extrapolation, Interpolation
from pixelflow.core.exceptions import (
    InvalidArgumentError,
    OutOfRangeError,
    SizeMismatchError,
    verify_in_interval,
    verify_positive,
)
from pixelflow.core.geometry import Point, Rectangle, Size
from pixelflow.core.storage import PixelStorage, create_storage

logger = logging.getLogger(__name__)

PointLike = Union[Point, Tuple[int, int]]
RectangleLike = Union[Rectangle, Tuple[int, int, int, int]]

# Pillow modes that map 1:1 onto a channel count
_PIL_MODES_BY_CHANNELS = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}


class Image:
    """
    Pixel buffer view with typed accessors.

    Samples are addressed as (x, y, channel) with the origin at the top-left
    corner of the view.
    """

    def __init__(
        self,
        width: int,
        height: int,
        channels: int = 1,
        encoding: Union[Encoding, str] = Encoding.NARROW,
        fill_color: Optional[Color] = None,
    ):
        """
        Allocate a new image.

        Args:
            width: Width in pixels (> 0)
            height: Height in pixels (> 0)
            channels: Number of channels (> 0)
            encoding: NARROW (uint8) or WIDE (float64)
            fill_color: Optional initial color, zero-filled otherwise

        Raises:
            InvalidArgumentError: For non-positive sizes, unknown encoding or a
                fill color with a different channel count
        """
        width = verify_positive(width, "width")
        height = verify_positive(height, "height")
        channels = verify_positive(channels, "channels")
        encoding = parse_enum(encoding, Encoding, "encoding")

        self._storage = create_storage(encoding, width, height, channels)
        self._x = 0
        self._y = 0
        self._width = width
        self._height = height
        self._start_channel = 0
        self._channels = channels

        if fill_color is not None:
            self.fill(fill_color)

    @classmethod
    def _view(
        cls,
        storage: PixelStorage,
        x: int,
        y: int,
        width: int,
        height: int,
        start_channel: int,
        channels: int,
    ) -> "Image":
        """Create an Image aliasing existing storage (no validation)."""
        image = cls.__new__(cls)
        image._storage = storage
        image._x = x
        image._y = y
        image._width = width
        image._height = height
        image._start_channel = start_channel
        image._channels = channels
        return image

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def size(self) -> Size:
        return Size(width=self._width, height=self._height)

    @property
    def encoding(self) -> Encoding:
        return self._storage.encoding

    @property
    def is_wide(self) -> bool:
        return self._storage.encoding == Encoding.WIDE

    @property
    def rectangle(self) -> Rectangle:
        """Position of this view inside its backing storage."""
        return Rectangle(x=self._x, y=self._y, width=self._width, height=self._height)

    def shares_storage(self, other: "Image") -> bool:
        """True if both images are views over the same storage buffer."""
        return self._storage is other._storage

    def same_geometry(self, other: "Image") -> bool:
        return (
            self._width == other._width
            and self._height == other._height
            and self._channels == other._channels
        )

    def verify_same_geometry(self, other: "Image", name: str = "image") -> None:
        """Raise SizeMismatchError unless other has the same size and channel count."""
        if not self.same_geometry(other):
            raise SizeMismatchError(
                f"Image '{name}' ({other._width}x{other._height}x{other._channels}) must have the "
                f"same size and channels as {self._width}x{self._height}x{self._channels}",
                parameter=name,
            )

    # ------------------------------------------------------------------
    # Sample access
    # ------------------------------------------------------------------

    def _verify_point(self, x: int, y: int, channel: int) -> None:
        verify_in_interval(x, 0, self._width, "x")
        verify_in_interval(y, 0, self._height, "y")
        verify_in_interval(channel, 0, self._channels, "channel")

    def get(self, x: int, y: int, channel: int = 0) -> float:
        """Read one sample; OutOfRangeError outside the image."""
        self._verify_point(x, y, channel)
        return self._storage.read(self._x + x, self._y + y, self._start_channel + channel)

    def set(self, x: int, y: int, channel: int, value: float) -> None:
        """
        Write one sample.

        Narrow images round half up and clamp to [0, 255]; wide images store
        the value as given.
        """
        self._verify_point(x, y, channel)
        value = float(value)
        if math.isnan(value):
            raise InvalidArgumentError("Value of color should not be a NaN", parameter="value")
        self._storage.write(self._x + x, self._y + y, self._start_channel + channel, value)

    def get_color(self, point: PointLike) -> Color:
        """Read all channels of one pixel."""
        x, y = _coordinates(point)
        self._verify_point(x, y, 0)
        return Color(self.as_array()[y, x, :])

    def set_color(self, point: PointLike, color: Color) -> None:
        """Write all channels of one pixel."""
        x, y = _coordinates(point)
        self._verify_point(x, y, 0)
        self._verify_color(color, "color")
        self.as_array()[y, x, :] = self._storage.encode(color.to_array())

    def get_extrapolated(
        self,
        x: int,
        y: int,
        channel: int,
        extrapolation: Union[Extrapolation, str] = Extrapolation.REFLECT,
    ) -> float:
        """
        Read a sample at a coordinate that may lie outside the image.

        Args:
            x, y: Coordinates, any integer
            channel: Channel index (must be valid)
            extrapolation: Border policy

        Returns:
            Sample value under the border policy
        """
        from pixelflow.vision.border import translate_coordinate

        verify_in_interval(channel, 0, self._channels, "channel")
        extrapolation = parse_enum(extrapolation, Extrapolation, "extrapolation")

        tx = translate_coordinate(x, self._width, extrapolation)
        ty = translate_coordinate(y, self._height, extrapolation)
        if tx is None or ty is None:
            return ColorConstants.MIN_VALUE
        return self.get(tx, ty, channel)

    def get_interpolated(
        self,
        x: float,
        y: float,
        channel: int = 0,
        interpolation: Union[Interpolation, str] = Interpolation.BILINEAR,
    ) -> float:
        """
        Sample the image at a sub-pixel position.

        Args:
            x: X position in [0, width - 1]
            y: Y position in [0, height - 1]
            channel: Channel index
            interpolation: NEAREST_NEIGHBOR, BILINEAR or BICUBIC

        Returns:
            Interpolated sample value
        """
        interpolation = parse_enum(interpolation, Interpolation, "interpolation")
        if not (0.0 <= x <= self._width - 1):
            raise OutOfRangeError(
                f"Value of 'x' (= {x}) must be in interval [0, {self._width - 1}]", parameter="x"
            )
        if not (0.0 <= y <= self._height - 1):
            raise OutOfRangeError(
                f"Value of 'y' (= {y}) must be in interval [0, {self._height - 1}]", parameter="y"
            )
        verify_in_interval(channel, 0, self._channels, "channel")

        if interpolation == Interpolation.NEAREST_NEIGHBOR:
            return self.get(math.floor(x + 0.5), math.floor(y + 0.5), channel)

        if interpolation == Interpolation.BILINEAR:
            x0, y0 = math.floor(x), math.floor(y)
            x1, y1 = min(x0 + 1, self._width - 1), min(y0 + 1, self._height - 1)
            fx, fy = x - x0, y - y0
            top = (1.0 - fx) * self.get(x0, y0, channel) + fx * self.get(x1, y0, channel)
            bottom = (1.0 - fx) * self.get(x0, y1, channel) + fx * self.get(x1, y1, channel)
            return (1.0 - fy) * top + fy * bottom

        # Bicubic (Catmull-Rom) over a 4x4 neighborhood, reflected at the borders
        base_x, base_y = math.floor(x), math.floor(y)
        rows = []
        for dy in (-1, 0, 1, 2):
            samples = [
                self.get_extrapolated(base_x + dx, base_y + dy, channel, Extrapolation.REFLECT)
                for dx in (-1, 0, 1, 2)
            ]
            rows.append(_cubic(samples, x - base_x))
        return _cubic(rows, y - base_y)

    # ------------------------------------------------------------------
    # Bulk access
    # ------------------------------------------------------------------

    def as_array(self) -> np.ndarray:
        """
        Writable NumPy view of this image, shape (height, width, channels).

        The view aliases storage; its dtype is uint8 for narrow and float64
        for wide images.
        """
        return self._storage.data[
            self._y : self._y + self._height,
            self._x : self._x + self._width,
            self._start_channel : self._start_channel + self._channels,
        ]

    def write_array(self, values: np.ndarray, x: int = 0, y: int = 0) -> None:
        """
        Write a block of samples with its top-left corner at (x, y).

        Args:
            values: Array of shape (h, w, channels), or (h, w) for one channel
            x, y: Destination of the block's top-left corner

        Raises:
            InvalidArgumentError: Channel count mismatch or NaN samples
            OutOfRangeError: Block does not fit inside the image
        """
        values = np.asarray(values)
        if values.ndim == 2:
            values = values[:, :, np.newaxis]
        if values.ndim != 3 or values.shape[2] != self._channels:
            raise InvalidArgumentError(
                f"Block of shape {values.shape} does not match {self._channels} channel(s)",
                parameter="values",
            )
        height, width = values.shape[:2]
        if x < 0 or y < 0 or x + width > self._width or y + height > self._height:
            raise OutOfRangeError(
                f"Block {width}x{height} at ({x}, {y}) exceeds image bounds "
                f"{self._width}x{self._height}",
                parameter="values",
            )
        if values.dtype.kind == "f" and np.isnan(values).any():
            raise InvalidArgumentError("Value of color should not be a NaN", parameter="values")
        self.as_array()[y : y + height, x : x + width, :] = self._storage.encode(values)

    def encode(self, values) -> np.ndarray:
        """Convert float samples to the representation of this image's storage."""
        return self._storage.encode(values)

    def fill(self, color: Color) -> None:
        """Set every pixel to color."""
        self._verify_color(color, "color")
        self.as_array()[...] = self._storage.encode(color.to_array())

    def _verify_color(self, color: Color, name: str) -> None:
        if not isinstance(color, Color):
            raise InvalidArgumentError(f"Parameter '{name}' must be a Color", parameter=name)
        if color.channels != self._channels:
            raise InvalidArgumentError(
                f"Parameter '{name}' should have same number of channels (= {self._channels}) "
                f"as image (= {color.channels})",
                parameter=name,
            )

    # ------------------------------------------------------------------
    # Views and copies
    # ------------------------------------------------------------------

    def get_subimage(self, rect: RectangleLike) -> "Image":
        """
        Aliasing view of a rectangle of this image.

        Args:
            rect: Rectangle in this image's coordinates

        Returns:
            Image whose (0, 0) maps to rect's top-left corner

        Raises:
            OutOfRangeError: If rect is not fully contained in this image
        """
        if not isinstance(rect, Rectangle):
            x, y, width, height = rect
            if min(x, y) < 0:
                raise OutOfRangeError(
                    f"Sub-image origin ({x}, {y}) must be non-negative", parameter="rect"
                )
            if width <= 0 or height <= 0:
                raise InvalidArgumentError(
                    f"Sub-image must not be empty, got {width}x{height}", parameter="rect"
                )
            rect = Rectangle(x=x, y=y, width=width, height=height)
        if rect.width <= 0 or rect.height <= 0:
            raise InvalidArgumentError(
                f"Sub-image must not be empty, got {rect.width}x{rect.height}", parameter="rect"
            )
        bounds = Rectangle(x=0, y=0, width=self._width, height=self._height)
        if not bounds.contains(rect):
            raise OutOfRangeError(
                f"Can not create sub-image {rect.to_dict()} of image "
                f"{self._width}x{self._height}",
                parameter="rect",
                value=rect,
            )
        return Image._view(
            self._storage,
            self._x + rect.x,
            self._y + rect.y,
            rect.width,
            rect.height,
            self._start_channel,
            self._channels,
        )

    def get_layer(self, start_channel: int, channels: int) -> "Image":
        """Aliasing view of `channels` consecutive channels starting at start_channel."""
        channels = verify_positive(channels, "channels")
        verify_in_interval(start_channel, 0, self._channels, "start_channel")
        if start_channel + channels > self._channels:
            raise OutOfRangeError(
                f"Value of 'start_channel + channels' (= {start_channel + channels}) must be less "
                f"or equal than {self._channels}",
                parameter="channels",
            )
        return Image._view(
            self._storage,
            self._x,
            self._y,
            self._width,
            self._height,
            self._start_channel + start_channel,
            channels,
        )

    def get_channel(self, channel: int) -> "Image":
        """Aliasing single-channel view."""
        return self.get_layer(channel, 1)

    def same(self) -> "Image":
        """New zero-filled image with the same size, channels and encoding."""
        return Image(self._width, self._height, self._channels, self.encoding)

    def copy(self) -> "Image":
        """Deep copy with independent storage."""
        result = self.same()
        result.as_array()[...] = self.as_array()
        return result

    def copy_to(self, target: "Image") -> None:
        """Copy samples into target (converted to target's encoding)."""
        self.verify_same_geometry(target, "target")
        target.write_array(self.as_array())

    # ------------------------------------------------------------------
    # Raw sample interchange
    # ------------------------------------------------------------------

    @classmethod
    def from_array(
        cls, array: np.ndarray, encoding: Union[Encoding, str] = Encoding.NARROW
    ) -> "Image":
        """
        Create an image from a (height, width[, channels]) array.

        Samples are copied; narrow images round and clamp them.
        """
        array = np.asarray(array)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3 or 0 in array.shape:
            raise InvalidArgumentError(
                f"Array of shape {array.shape} is not a non-empty "
                f"(height, width[, channels]) array",
                parameter="array",
            )
        height, width, channels = array.shape
        image = cls(width, height, channels, encoding)
        image.write_array(array)
        return image

    def to_array(self, dtype=np.uint8) -> np.ndarray:
        """
        Export samples as a new (height, width, channels) array in [0, 255].

        Args:
            dtype: uint8 (rounded) or a float type (unrounded, clamped)
        """
        values = np.clip(
            self.as_array().astype(np.float64), ColorConstants.MIN_VALUE, ColorConstants.MAX_VALUE
        )
        if np.dtype(dtype).kind in "ui":
            values = np.floor(values + 0.5)
        return values.astype(dtype)

    @classmethod
    def from_pil(
        cls, pil_image: PILImage.Image, encoding: Union[Encoding, str] = Encoding.NARROW
    ) -> "Image":
        """Create an image from a Pillow image (L, LA, RGB, RGBA; others converted to RGB)."""
        if pil_image.mode not in _PIL_MODES_BY_CHANNELS.values():
            pil_image = pil_image.convert("RGB")
        return cls.from_array(np.array(pil_image), encoding)

    def to_pil(self) -> PILImage.Image:
        """Export to a Pillow image; supports 1 to 4 channels."""
        if self._channels not in _PIL_MODES_BY_CHANNELS:
            raise InvalidArgumentError(
                f"Can not export {self._channels} channels to a Pillow image (1..4 supported)",
                parameter="channels",
            )
        array = self.to_array(np.uint8)
        if self._channels == 1:
            array = array[:, :, 0]
        return PILImage.fromarray(array)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def equals(self, other: object, precision: Optional[float] = None) -> bool:
        """
        Compare size, channel count and every sample.

        Args:
            other: Image to compare with
            precision: Allowed absolute difference; defaults to exact for two
                narrow images and a fixed epsilon when a wide image is involved
        """
        if not isinstance(other, Image):
            return False
        if other is self:
            return True
        if not self.same_geometry(other):
            return False
        if precision is None:
            precision = (
                PrecisionConstants.EPSILON if (self.is_wide or other.is_wide) else 0.0
            )
        diff = np.abs(
            self.as_array().astype(np.float64) - other.as_array().astype(np.float64)
        )
        return bool(np.all(diff <= precision))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Image(width={self._width}, height={self._height}, channels={self._channels}, "
            f"encoding={self.encoding.value}, offset=({self._x}, {self._y}), "
            f"start_channel={self._start_channel})"
        )


def _coordinates(point: PointLike) -> Tuple[int, int]:
    """Raw (x, y) of a Point or tuple; negative values are left to the bounds check."""
    if isinstance(point, Point):
        return point.x, point.y
    x, y = point
    return int(x), int(y)


def _cubic(p: Sequence[float], t: float) -> float:
    """Catmull-Rom interpolation between p[1] and p[2]."""
    cubic_term = 3.0 * (p[1] - p[2]) + p[3] - p[0]
    quadratic_term = 2.0 * p[0] - 5.0 * p[1] + 4.0 * p[2] - p[3] + t * cubic_term
    return p[1] + 0.5 * t * (p[2] - p[0] + t * quadratic_term)
