"""Front-end entry points: source text or files in, Programs out."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional

from zscheme.analysis.builder import AstBuilder
from zscheme.config import Settings
from zscheme.errors import SchemeError
from zscheme.reader.parser import DatumStream
from zscheme.reader.source import FileLexer, read_tokens
from zscheme.reader.tokens import PositionedToken
from zscheme.types.datum import Datum
from zscheme.types.expression import Program, TopLevelForm


def read_datums(text: str, settings: Optional[Settings] = None) -> DatumStream:
    """Datum stream over an in-memory string."""
    return DatumStream(read_tokens(text), settings or Settings.from_env())


def build_forms(datums: DatumStream, builder: AstBuilder) -> Iterator[TopLevelForm]:
    """Build each datum of the stream in turn.

    Errors raised while building carry no source position of their own; they
    are tagged with the position of the top-level datum being built.
    """
    for datum in datums:
        try:
            forms = builder.build_toplevel(datum)
        except SchemeError as exc:
            if datums.position is not None:
                exc.locate(*datums.position)
            raise
        yield from forms


def compile_tokens(
    tokens: Iterable[PositionedToken],
    globals: Iterable[str] = (),
    settings: Optional[Settings] = None,
) -> Program:
    settings = settings or Settings.from_env()
    builder = AstBuilder(globals=globals, settings=settings)
    return Program(tuple(build_forms(DatumStream(tokens, settings), builder)))


def compile_source(
    text: str,
    globals: Iterable[str] = (),
    settings: Optional[Settings] = None,
) -> Program:
    return compile_tokens(read_tokens(text), globals, settings)


def compile_file(
    path: str | Path,
    globals: Iterable[str] = (),
    settings: Optional[Settings] = None,
) -> Program:
    """Compile a file; failure to open it raises SchemeIOError immediately."""
    with FileLexer(path) as tokens:
        return compile_tokens(tokens, globals, settings)


def parse_all(text: str, settings: Optional[Settings] = None) -> list[Datum]:
    return list(read_datums(text, settings))
