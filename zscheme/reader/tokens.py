"""Token and number types produced by the lexer."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Union

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class TokenKind(str, Enum):
    STRING = "string"
    CHARACTER = "character"
    BOOLEAN = "boolean"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    PUNCTUATOR = "punctuator"
    WHITESPACE = "whitespace"
    COMMENT = "comment"


@dataclass(frozen=True)
class Integer:
    """A signed 32-bit integer."""

    value: int

    def __post_init__(self):
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise OverflowError(f"{self.value} does not fit in 32 bits")

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Float:
    """A 32-bit float. The value is rounded to single precision on creation."""

    value: float

    def __post_init__(self):
        # struct raises OverflowError for values outside the f32 range
        rounded = struct.unpack("f", struct.pack("f", self.value))[0]
        if math.isinf(rounded) or math.isnan(rounded):
            raise OverflowError(f"{self.value} does not fit in 32 bits")
        object.__setattr__(self, "value", rounded)

    def __str__(self):
        return repr(self.value)


LispNum = Union[Integer, Float]


class Token(NamedTuple):
    kind: TokenKind
    value: Any = None

    @property
    def is_atmosphere(self) -> bool:
        """Whitespace and comments carry no payload for the parser."""
        return self.kind in (TokenKind.WHITESPACE, TokenKind.COMMENT)

    def is_punctuator(self, text: str) -> bool:
        return self.kind is TokenKind.PUNCTUATOR and self.value == text


@dataclass(frozen=True)
class PositionedToken:
    """A token with the 1-based line and 0-based column of its first character.

    lexeme is the exact source text the token was read from.
    """

    token: Token
    line: int
    column: int
    lexeme: str = ""
