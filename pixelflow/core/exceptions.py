"""
Exception hierarchy for Pixel Flow.

Every failure is raised synchronously at the violated precondition and names
the offending parameter.
"""

import operator
from typing import Any, Optional


class PixelFlowError(Exception):
    """Base class for all Pixel Flow errors."""

    def __init__(self, message: str, parameter: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.value = value

    def __str__(self) -> str:
        return self.message


class InvalidArgumentError(PixelFlowError, ValueError):
    """Malformed parameter: bad size, unknown mode, misplaced anchor, NaN, ..."""


class OutOfRangeError(PixelFlowError, IndexError):
    """Coordinate, rectangle or channel window outside an image."""


class SizeMismatchError(PixelFlowError, ValueError):
    """Two images expected to share geometry differ."""


def verify_positive(value: int, name: str) -> int:
    """Raise InvalidArgumentError unless value is an integer > 0."""
    try:
        value = operator.index(value)
    except TypeError:
        raise InvalidArgumentError(
            f"Parameter '{name}' must be an integer, got {value!r}", parameter=name, value=value
        ) from None
    if value <= 0:
        raise InvalidArgumentError(
            f"Value of '{name}' (= {value}) must be more than 0", parameter=name, value=value
        )
    return value


def verify_in_interval(value: int, lower: int, upper: int, name: str) -> None:
    """Raise OutOfRangeError unless lower <= value < upper."""
    if value < lower or value >= upper:
        raise OutOfRangeError(
            f"Value of '{name}' (= {value}) must be in interval {lower}..{upper - 1}",
            parameter=name,
            value=value,
        )
