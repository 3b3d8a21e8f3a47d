"""CSS property value lexer.

Splits a raw value string into a flat token list of numbers and strings:

    "translate(42%, 0px) scale(1.5)"  ->  ["translate", 42.0, "%", 0.0, "px", "scale", 1.5]

Characters of compatible classes accumulate into a buffer. The buffer is
flushed when the class changes incompatibly or on a break symbol (space,
brackets). Unrecognized characters, commas included, are dropped without
flushing. The lexer never fails.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


Token = Union[float, str]

DIGITS = "0123456789"


class CharClass(Enum):
    """Lexical class of a single character."""

    LETTER = "letter"
    DIGIT = "digit"
    POINT = "point"
    HASH = "hash"
    PERCENT = "percent"
    MINUS = "minus"
    SPACE = "space"
    BRACKET = "bracket"
    UNKNOWN = "unknown"


def classify(ch: str) -> CharClass:
    """Return the lexical class of a character."""
    if ch in DIGITS:
        return CharClass.DIGIT
    if ch.isalpha() or ch == "_":
        return CharClass.LETTER
    if ch == ".":
        return CharClass.POINT
    if ch == "#":
        return CharClass.HASH
    if ch == "%":
        return CharClass.PERCENT
    if ch == "-":
        return CharClass.MINUS
    if ch.isspace():
        return CharClass.SPACE
    if ch in "()":
        return CharClass.BRACKET
    return CharClass.UNKNOWN


class _Buffer:
    """Characters collected for the token being built."""

    def __init__(self) -> None:
        self.chars: list[str] = []
        self.numeric = False

    def __bool__(self) -> bool:
        return bool(self.chars)

    @property
    def text(self) -> str:
        return "".join(self.chars)

    def start(self, ch: str, numeric: bool) -> None:
        self.chars = [ch]
        self.numeric = numeric

    def take(self) -> tuple[str, bool]:
        text, numeric = self.text, self.numeric
        self.chars = []
        self.numeric = False
        return text, numeric


def lex_css_value(raw: str) -> list[Token]:
    """Tokenize a raw CSS property value."""
    tokens: list[Token] = []
    buf = _Buffer()

    def flush() -> None:
        if not buf:
            return
        text, numeric = buf.take()
        if numeric:
            # A lone sign or point carries no value
            if any(c in DIGITS for c in text):
                tokens.append(float(text))
        else:
            tokens.append(text)

    for ch in raw:
        cls = classify(ch)

        if cls in (CharClass.SPACE, CharClass.BRACKET):
            flush()

        elif cls is CharClass.DIGIT:
            # Digits extend numbers as well as words (#ff0000, h1)
            if buf:
                buf.chars.append(ch)
            else:
                buf.start(ch, numeric=True)

        elif cls is CharClass.POINT:
            if buf.numeric and "." not in buf.text:
                buf.chars.append(ch)
            else:
                flush()
                buf.start(ch, numeric=True)

        elif cls is CharClass.MINUS:
            if buf and not buf.numeric:
                # Hyphenated identifier (ease-in, inline-block)
                buf.chars.append(ch)
            else:
                flush()
                buf.start(ch, numeric=True)

        elif cls is CharClass.LETTER:
            if buf.numeric and buf.text == "-":
                # Leading dash of an identifier (-webkit-box)
                buf.numeric = False
                buf.chars.append(ch)
            elif buf and not buf.numeric:
                buf.chars.append(ch)
            else:
                flush()
                buf.start(ch, numeric=False)

        elif cls is CharClass.HASH:
            flush()
            buf.start(ch, numeric=False)

        elif cls is CharClass.PERCENT:
            flush()
            tokens.append(ch)

        # CharClass.UNKNOWN is dropped

    flush()
    return tokens
