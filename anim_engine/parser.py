"""CSS property value parser.

Turns a raw value string into a typed value by running its tokens through
an ordered list of handlers. The first handler returning a value wins:

  1. static/color   a single word (``block``, ``#ff0000``)
  2. numeric        number/unit pairs (``42px 13.37rem 0``)
  3. transform      supported transform functions (``translate(42%, 0px) scale(1.5)``)

Anything else is kept as a static value carrying the original string, so
it can still be applied, only not blended.
"""

from __future__ import annotations

from typing import Callable, Optional

from anim_engine.lexer import Token, lex_css_value
from anim_engine.values import (
    ColorValue,
    CssValue,
    NumericPair,
    NumericValue,
    StaticValue,
    TransformValue,
)


# Transform functions that can be parsed
SUPPORTED_TRANSFORMS = frozenset(
    {
        "translate",
        "translateX",
        "translateY",
        "translateZ",
        "scale",
        "scaleX",
        "scaleY",
        "scaleZ",
        "rotate",
        "skew",
        "skewX",
        "skewY",
    }
)

ParserHandler = Callable[[list[Token]], Optional[CssValue]]


def _is_number(token: Token) -> bool:
    return isinstance(token, float)


def _numbers_only(buffer: list[Token]) -> bool:
    return all(_is_number(t) for t in buffer)


def _unitless(buffer: list[Token]) -> list[NumericPair]:
    return [(num, "") for num in buffer]


def _take_pair(buffer: list[Token]) -> Optional[NumericPair]:
    """Return the buffer as a (number, unit) pair if it has that shape."""
    if len(buffer) == 2 and _is_number(buffer[0]) and isinstance(buffer[1], str):
        return (buffer[0], buffer[1])
    return None


# ── Handlers ──────────────────────────────────────────────────────────────

def static_and_color_handler(tokens: list[Token]) -> Optional[CssValue]:
    if len(tokens) == 1 and isinstance(tokens[0], str):
        token = tokens[0]
        if token.startswith("#"):
            return ColorValue(value=token)
        return StaticValue(value=token)
    return None


def numeric_handler(tokens: list[Token]) -> Optional[CssValue]:
    if not tokens or not _is_number(tokens[0]):
        return None

    pairs: list[NumericPair] = []
    buffer: list[Token] = []

    for token in tokens:
        buffer.append(token)
        pair = _take_pair(buffer)
        if pair:
            pairs.append(pair)
            buffer = []

    # Leftovers must be plain numbers
    if buffer:
        if not _numbers_only(buffer):
            return None
        pairs.extend(_unitless(buffer))

    return NumericValue(values=pairs)


def transform_handler(tokens: list[Token]) -> Optional[CssValue]:
    if len(tokens) < 2 or tokens[0] not in SUPPORTED_TRANSFORMS:
        return None

    functions: dict[str, list[NumericPair]] = {}
    name = ""
    params: list[NumericPair] = []
    buffer: list[Token] = []

    for token in tokens:
        if isinstance(token, str) and token in SUPPORTED_TRANSFORMS:
            if params or buffer:
                # A non-empty buffer means the params did not pair up with
                # units, so they must all be unitless
                if buffer:
                    if not _numbers_only(buffer):
                        return None
                    params.extend(_unitless(buffer))
                functions[name] = params
                params = []
                buffer = []
            name = token
        else:
            buffer.append(token)
            pair = _take_pair(buffer)
            if pair:
                params.append(pair)
                buffer = []

    # Last function
    if buffer and _numbers_only(buffer):
        params.extend(_unitless(buffer))
    if params:
        functions[name] = params

    if not functions:
        return None
    return TransformValue(values=functions)


# Order matters: a single word must not reach the numeric or transform handlers.
PARSER_HANDLERS: list[ParserHandler] = [
    static_and_color_handler,
    numeric_handler,
    transform_handler,
]


def parse_css_value(raw: str) -> CssValue:
    """Parse a CSS property value string into a typed value."""
    tokens = lex_css_value(raw)

    for handler in PARSER_HANDLERS:
        value = handler(tokens)
        if value is not None:
            return value

    return StaticValue(value=raw)
