"""
  Scheme Lexer

- Pure: next_token(text) returns the next Token and the unconsumed rest.
- Ordered alternation: the alternatives below are tried in a fixed order and
  the first one that matches wins. This is what makes `#t` a boolean and
  `3.14` a single float.

      string, boolean, character, identifier, number, punctuator,
      whitespace, comment

- Tokens are recognized within one line of input; the positional reader
  feeds lines one at a time.
"""

from __future__ import annotations

import re
from typing import Callable, Iterator, Optional

from zscheme.errors import SchemeLexError
from zscheme.reader.tokens import Float, Integer, LispNum, Token, TokenKind

# Zero-width: a token that must end at a delimiter or at the end of input.
_DELIMITED = r"(?=[ \t\r\n()\";]|\Z)"

_SPECIAL_INITIAL = r"!$%&*/:<=>?^_~"
_INITIAL = rf"(?:[^\W\d_]|[{re.escape(_SPECIAL_INITIAL)}])"
_SUBSEQUENT = rf"(?:[^\W_]|[{re.escape(_SPECIAL_INITIAL)}+\-.@])"

STRING_RE = re.compile(r'"((?:\\[\\"n]|[^\\"])*)"', re.DOTALL)
BOOLEAN_RE = re.compile(r"#([tf])")
CHARACTER_RE = re.compile(r"#\\(space|newline|.)" + _DELIMITED, re.DOTALL)
IDENTIFIER_RE = re.compile(rf"(?:{_INITIAL}{_SUBSEQUENT}*|\+|-|\.\.\.)" + _DELIMITED)
FLOAT_RE = re.compile(r"[+-]?[0-9]*\.[0-9]+")
INTEGER_RE = re.compile(r"[+-]?[0-9]+")
# Longest applicable form first: `#(` before `(`, `,@` before `,`.
PUNCTUATOR_RE = re.compile(r"#\(|\(|\)|'|`|,@|,|\.")
WHITESPACE_RE = re.compile(r"[ \t\r\n]+")
COMMENT_RE = re.compile(r";[^\n]*\n?")

ESCAPES: dict[str, str] = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
}

NAMED_CHARS: dict[str, str] = {
    "space": " ",
    "newline": "\n",
}

# An alternative returns (token, rest) on success and None when it does not apply.
Alternative = Callable[[str], Optional[tuple[Token, str]]]


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: ESCAPES[m.group(1)], body)


def lex_string(text: str) -> Optional[tuple[Token, str]]:
    m = STRING_RE.match(text)
    if not m:
        return None
    return Token(TokenKind.STRING, _unescape(m.group(1))), text[m.end():]


def lex_boolean(text: str) -> Optional[tuple[Token, str]]:
    m = BOOLEAN_RE.match(text)
    if not m:
        return None
    return Token(TokenKind.BOOLEAN, m.group(1) == "t"), text[m.end():]


def lex_character(text: str) -> Optional[tuple[Token, str]]:
    m = CHARACTER_RE.match(text)
    if not m:
        return None
    name = m.group(1)
    return Token(TokenKind.CHARACTER, NAMED_CHARS.get(name, name)), text[m.end():]


def lex_identifier(text: str) -> Optional[tuple[Token, str]]:
    m = IDENTIFIER_RE.match(text)
    if not m:
        return None
    return Token(TokenKind.IDENTIFIER, m.group(0)), text[m.end():]


def parse_number(literal: str) -> LispNum:
    """Convert a matched numeric literal; a literal with a `.` is a Float.

    Raises OverflowError when the value does not fit the 32-bit target type,
    and ValueError for integer literals too long to convert at all.
    """
    if "." in literal:
        return Float(float(literal))
    return Integer(int(literal))


def lex_number(text: str) -> Optional[tuple[Token, str]]:
    m = FLOAT_RE.match(text) or INTEGER_RE.match(text)
    if not m:
        return None
    rest = text[m.end():]
    try:
        number = parse_number(m.group(0))
    except (OverflowError, ValueError):
        # ValueError: literal longer than the interpreter's int conversion limit
        raise SchemeLexError(text, reason="too large") from None
    return Token(TokenKind.NUMBER, number), rest


def lex_punctuator(text: str) -> Optional[tuple[Token, str]]:
    m = PUNCTUATOR_RE.match(text)
    if not m:
        return None
    return Token(TokenKind.PUNCTUATOR, m.group(0)), text[m.end():]


def lex_whitespace(text: str) -> Optional[tuple[Token, str]]:
    m = WHITESPACE_RE.match(text)
    if not m:
        return None
    return Token(TokenKind.WHITESPACE), text[m.end():]


def lex_comment(text: str) -> Optional[tuple[Token, str]]:
    m = COMMENT_RE.match(text)
    if not m:
        return None
    return Token(TokenKind.COMMENT), text[m.end():]


ALTERNATIVES: tuple[Alternative, ...] = (
    lex_string,
    lex_boolean,
    lex_character,
    lex_identifier,
    lex_number,
    lex_punctuator,
    lex_whitespace,
    lex_comment,
)


def next_token(text: str) -> tuple[Token, str]:
    """Return the next token of `text` and the remaining input.

    Raises SchemeLexError when no alternative matches (reason "no match") or
    when a numeric literal overflows its type (reason "too large").
    """
    for alternative in ALTERNATIVES:
        result = alternative(text)
        if result is not None:
            return result
    raise SchemeLexError(text)


def tokenize(text: str) -> Iterator[tuple[Token, str]]:
    """Token generator over a whole string: yields (token, lexeme) pairs."""
    while text:
        token, rest = next_token(text)
        yield token, text[: len(text) - len(rest)]
        text = rest
