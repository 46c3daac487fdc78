"""
Enum conversion utilities.

Provides standardized, strict conversion of mode parameters to enums.
Unlike a lenient parser there is no fallback: an unknown value is a caller
error and raises InvalidArgumentError naming the parameter.
"""

from enum import Enum
from typing import Any, Type, TypeVar

from pixelflow.core.exceptions import InvalidArgumentError

E = TypeVar("E", bound=Enum)


def parse_enum(value: Any, enum_class: Type[E], name: str) -> E:
    """
    Parse value to an enum member.

    Accepts an enum member, an enum value (e.g. ``4`` or ``"reflect"``) or a
    member name in any case (e.g. ``"REFLECT"``).

    Args:
        value: Value to parse
        enum_class: Enum class to parse to
        name: Parameter name used in the error message

    Returns:
        Parsed enum member

    Raises:
        InvalidArgumentError: If value does not name a member of enum_class

    Example:
        >>> parse_enum("Sobel", EdgeMethod, "method")
        <EdgeMethod.SOBEL: 'sobel'>
    """
    # Already an enum instance
    if isinstance(value, enum_class):
        return value

    if value is not None and not isinstance(value, bool):
        try:
            return enum_class(value)
        except ValueError:
            pass

        if isinstance(value, str):
            normalized = value.strip()
            try:
                return enum_class(normalized.lower())
            except ValueError:
                pass
            member = enum_class.__members__.get(normalized.upper())
            if member is not None:
                return member

    allowed = ", ".join(str(enum_to_string(m)) for m in enum_class)
    raise InvalidArgumentError(
        f"Parameter '{name}' has unknown value {value!r}! Use one of: {allowed}",
        parameter=name,
        value=value,
    )


def enum_to_string(value: Any) -> Any:
    """
    Convert enum to its value, or pass through if already a plain value.

    Example:
        >>> enum_to_string(Extrapolation.REFLECT)
        'reflect'
    """
    return value.value if hasattr(value, "value") else value
