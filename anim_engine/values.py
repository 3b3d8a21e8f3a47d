"""Typed CSS property values.

A parsed property value is one of four variants, tagged by ``ValueType``:

  - numeric:   a list of (number, unit) pairs, e.g. ``42px 13.37rem 0``
  - static:    an opaque keyword or shorthand, applied verbatim
  - color:     a hex color string
  - transform: an ordered chain of transform functions, each holding
               its own (number, unit) parameter list

Consumers dispatch on ``value.type`` rather than on the Python class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class ValueType(Enum):
    """Variant tag of a parsed CSS property value."""

    NUMERIC = "numeric"
    STATIC = "static"
    COLOR = "color"
    TRANSFORM = "transform"


# (number, unit) where unit may be empty
NumericPair = tuple[float, str]


@dataclass
class NumericValue:
    values: list[NumericPair] = field(default_factory=list)
    type: ValueType = field(default=ValueType.NUMERIC, init=False)


@dataclass
class StaticValue:
    value: str = ""
    type: ValueType = field(default=ValueType.STATIC, init=False)


@dataclass
class ColorValue:
    value: str = ""
    type: ValueType = field(default=ValueType.COLOR, init=False)


@dataclass
class TransformValue:
    """Transform function name -> parameters, in declaration order."""

    values: dict[str, list[NumericPair]] = field(default_factory=dict)
    type: ValueType = field(default=ValueType.TRANSFORM, init=False)


CssValue = Union[NumericValue, StaticValue, ColorValue, TransformValue]

# Property name -> parsed value
ParsedStyles = dict[str, CssValue]


def format_number(num: float) -> str:
    """Render a number the way CSS expects it (no trailing ``.0``)."""
    if float(num).is_integer():
        return str(int(num))
    return repr(float(num))


def _format_pairs(pairs: list[NumericPair], sep: str) -> str:
    return sep.join(format_number(num) + unit for num, unit in pairs)


def stringify_value(value: CssValue) -> str:
    """Convert a parsed CSS property value to its string representation."""
    if value.type is ValueType.NUMERIC:
        return _format_pairs(value.values, " ")
    if value.type is ValueType.TRANSFORM:
        return " ".join(
            f"{name}({_format_pairs(params, ', ')})"
            for name, params in value.values.items()
        )
    if value.type in (ValueType.COLOR, ValueType.STATIC):
        return value.value
    raise TypeError(f"Unknown CSS value type: {value.type!r}")


def copy_value(value: CssValue) -> CssValue:
    """Return an independent copy of a parsed value."""
    if value.type is ValueType.NUMERIC:
        return NumericValue(values=list(value.values))
    if value.type is ValueType.TRANSFORM:
        return TransformValue(
            values={name: list(params) for name, params in value.values.items()}
        )
    if value.type is ValueType.COLOR:
        return ColorValue(value=value.value)
    if value.type is ValueType.STATIC:
        return StaticValue(value=value.value)
    raise TypeError(f"Unknown CSS value type: {value.type!r}")
