"""Positional reader: line sources in, positioned tokens out.

Columns advance by the length of input each token consumed (computed from
the remaining text before and after the token), so escape sequences inside
strings count as the characters actually written in the source.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, Iterator

from zscheme.errors import SchemeError, SchemeIOError, SchemeLexError
from zscheme.reader.lexer import next_token
from zscheme.reader.tokens import PositionedToken

logger = logging.getLogger(__name__)


class PositionalReader:
    """Iterator of PositionedTokens over a sequence of text lines.

    The first error (lexical or I/O) is raised once; afterwards the reader is
    exhausted and never yields again.
    """

    def __init__(self, lines: Iterable[str]):
        self.lines: Iterator[str] = iter(lines)
        self.line_text: str = ""
        self.remaining: str = ""
        self.line_number: int = 0
        self.column: int = 0
        self.finished: bool = False

    def __iter__(self) -> PositionalReader:
        return self

    def _pull_line(self) -> bool:
        try:
            line = next(self.lines)
        except StopIteration:
            return False
        except (OSError, UnicodeDecodeError) as exc:
            raise SchemeIOError(
                f"failed reading line {self.line_number + 1}: {exc}"
            ) from exc
        self.line_number += 1
        self.line_text = line
        self.remaining = line
        self.column = 0
        return True

    def __next__(self) -> PositionedToken:
        if self.finished:
            raise StopIteration
        try:
            while not self.remaining:
                if not self._pull_line():
                    self.finished = True
                    raise StopIteration
            before = self.remaining
            try:
                token, after = next_token(before)
            except SchemeLexError as exc:
                raise exc.at(self.line_number, self.column, before) from None
        except SchemeError:
            self.finished = True
            raise
        consumed = len(before) - len(after)
        positioned = PositionedToken(token, self.line_number, self.column, before[:consumed])
        self.remaining = after
        self.column += consumed
        return positioned


class FileLexer(PositionalReader):
    """PositionalReader over a file on disk.

    The file is opened eagerly: a missing or unreadable file raises
    SchemeIOError from the constructor. It is closed once the token stream is
    exhausted, on error, or when used as a context manager.
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8"):
        self.path = Path(path)
        try:
            self._handle = open(self.path, "r", encoding=encoding, newline="")
        except OSError as exc:
            raise SchemeIOError(f"cannot open {self.path}: {exc}") from exc
        logger.debug("opened %s", self.path)
        super().__init__(self._handle)

    def __next__(self) -> PositionedToken:
        try:
            return super().__next__()
        except (StopIteration, SchemeError):
            self.close()
            raise

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()
            logger.debug("closed %s", self.path)

    def __enter__(self) -> FileLexer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def source_lines(text: str) -> list[str]:
    """Split `text` into lines the way FileLexer reads a file.

    Only LF, CR and CRLF end a line; other Unicode line separators (form
    feed, U+2028, ...) stay inside their line.
    """
    return io.StringIO(text, newline="").readlines()


def read_tokens(text: str) -> PositionalReader:
    """PositionalReader over an in-memory string."""
    return PositionalReader(source_lines(text))
