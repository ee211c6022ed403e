"""
  Datum Parser

- Recursive descent with one token of lookahead (peek), needed to decide
  list/vector termination and to spot the dot of a dotted pair.
- Whitespace and comment tokens are skipped and never reach the output.
- Lexical and I/O errors raised by the token source propagate unchanged;
  after any error the stream yields nothing more.

    (a b)      -> List((a, b))
    (a . b)    -> DottedPair((a,), b)
    #(a b)     -> Vector((a, b))
    'a `a ,a ,@a -> Quote / Backquote / Unquote / UnquoteSplice
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from zscheme.config import Settings
from zscheme.errors import (
    MissingCloseParen,
    SchemeError,
    SchemeSyntaxError,
    TokenStreamEnded,
    UnexpectedToken,
)
from zscheme.reader.tokens import PositionedToken, TokenKind
from zscheme.types.datum import (
    Backquote,
    Boolean,
    Character,
    Datum,
    Identifier,
    Number,
    Quote,
    String,
    Unquote,
    UnquoteSplice,
    Vector,
    make_list,
)

SIMPLE_DATA = {
    TokenKind.BOOLEAN: Boolean,
    TokenKind.STRING: String,
    TokenKind.CHARACTER: Character,
    TokenKind.NUMBER: Number,
    TokenKind.IDENTIFIER: Identifier,
}

ABBREVIATION_PREFIXES = {
    "'": Quote,
    "`": Backquote,
    ",": Unquote,
    ",@": UnquoteSplice,
}


class TokenStream:
    def __init__(self, tokens: Iterable[PositionedToken], settings: Optional[Settings] = None):
        self.tokens = iter(tokens)
        self.buffer: list[PositionedToken] = []
        self.error: Optional[SchemeError] = None
        self.settings = settings or Settings.from_env()
        self.depth = 0

    def peek(self) -> Optional[PositionedToken]:
        """Next token without consuming it; None once the source is exhausted.

        An error from the source is held back and re-raised by advance(), so
        that peeking never loses it.
        """
        if not self.buffer and self.error is None:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None
            except SchemeError as exc:
                self.error = exc
        if self.buffer:
            return self.buffer[0]
        if self.error is not None:
            raise self.error
        return None

    def advance(self) -> PositionedToken:
        token = self.peek()
        if token is None:
            raise TokenStreamEnded("another token was expected")
        return self.buffer.pop(0)

    def skip_atmosphere(self) -> Optional[PositionedToken]:
        """Drop whitespace and comments; return the next significant token."""
        token = self.peek()
        while token is not None and token.token.is_atmosphere:
            self.advance()
            token = self.peek()
        return token

    def parse_datum(self) -> Datum:
        """Parse exactly one datum from the stream."""
        positioned = self.skip_atmosphere()
        if positioned is None:
            raise TokenStreamEnded("a datum was expected")

        token = positioned.token
        if token.kind in SIMPLE_DATA:
            self.advance()
            return SIMPLE_DATA[token.kind](token.value)

        if token.kind is TokenKind.PUNCTUATOR:
            if token.value == "(":
                return self._nested(self._parse_list)
            if token.value == "#(":
                return self._nested(self._parse_vector)
            if token.value in ABBREVIATION_PREFIXES:
                return self._nested(self._parse_abbrev)

        raise UnexpectedToken(line=positioned.line, column=positioned.column, text=positioned.lexeme)

    def _nested(self, parse) -> Datum:
        opener = self.peek()
        if self.depth >= self.settings.max_depth:
            raise SchemeSyntaxError(
                f"nesting deeper than {self.settings.max_depth} levels",
                opener.line,
                opener.column,
                opener.lexeme,
            )
        self.depth += 1
        try:
            return parse()
        finally:
            self.depth -= 1

    def _expect_more(self, opener: PositionedToken) -> PositionedToken:
        positioned = self.skip_atmosphere()
        if positioned is None:
            raise MissingCloseParen(
                f"'{opener.lexeme}' is never closed", opener.line, opener.column, opener.lexeme
            )
        return positioned

    def _parse_list(self) -> Datum:
        opener = self.advance()  # consume "("
        items: list[Datum] = []
        while True:
            positioned = self._expect_more(opener)
            if positioned.token.is_punctuator(")"):
                self.advance()
                return make_list(items)
            if positioned.token.is_punctuator("."):
                if not items:
                    raise UnexpectedToken(
                        "a dotted pair needs at least one element before the dot",
                        positioned.line,
                        positioned.column,
                        positioned.lexeme,
                    )
                return self._parse_cdr(opener, items)
            items.append(self.parse_datum())

    def _parse_cdr(self, opener: PositionedToken, items: list[Datum]) -> Datum:
        self.advance()  # consume "."
        self._expect_more(opener)
        tail = self.parse_datum()
        closer = self._expect_more(opener)
        if not closer.token.is_punctuator(")"):
            raise MissingCloseParen(
                "expected ')' after the tail of a dotted pair",
                closer.line,
                closer.column,
                closer.lexeme,
            )
        self.advance()
        return make_list(items, tail)

    def _parse_vector(self) -> Datum:
        opener = self.advance()  # consume "#("
        items: list[Datum] = []
        while True:
            positioned = self._expect_more(opener)
            if positioned.token.is_punctuator(")"):
                self.advance()
                return Vector(tuple(items))
            items.append(self.parse_datum())

    def _parse_abbrev(self) -> Datum:
        prefix = self.advance()
        if self.skip_atmosphere() is None:
            raise TokenStreamEnded(
                f"a datum was expected after '{prefix.lexeme}'", prefix.line, prefix.column, prefix.lexeme
            )
        datum = self.parse_datum()
        return ABBREVIATION_PREFIXES[prefix.token.value](datum)


class DatumStream:
    """Iterator of Datums over a token source, fail-fast.

    Iteration ends cleanly when only whitespace and comments remain. position
    holds the (line, column) of the first token of the datum being parsed, or
    of the last one returned.
    """

    def __init__(self, tokens: Iterable[PositionedToken], settings: Optional[Settings] = None):
        self.stream = TokenStream(tokens, settings)
        self.position: Optional[tuple[int, int]] = None
        self.finished = False

    def __iter__(self) -> Iterator[Datum]:
        return self

    def __next__(self) -> Datum:
        if self.finished:
            raise StopIteration
        try:
            first = self.stream.skip_atmosphere()
            if first is None:
                self.finished = True
                raise StopIteration
            self.position = (first.line, first.column)
            return self.stream.parse_datum()
        except SchemeError:
            self.finished = True
            raise
