"""Turn zscheme front-end errors into LSP diagnostics.

A document is read and built one top-level form at a time, exactly as the
compiler does it. The first error stops the pipeline, so a document has at
most one diagnostic.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from lsprotocol.types import Diagnostic, DiagnosticSeverity, Position, Range

from zscheme.analysis.builder import AstBuilder
from zscheme.compiler import build_forms, read_datums
from zscheme.config import Settings
from zscheme.errors import SchemeError
from zscheme.reader.source import source_lines

SOURCE = "zscheme-ls"


def error_range(error: SchemeError, text: str) -> Range:
    """Range covering the offending text, clipped to its line.

    Errors carry a 1-based line and 0-based column; LSP positions are 0-based
    in both. Errors without a position are reported at the start of the
    document.
    """
    if not error.has_position:
        return Range(start=Position(line=0, character=0), end=Position(line=0, character=1))

    line = error.line - 1
    column = error.column
    lines = source_lines(text)
    line_length = len(lines[line].rstrip("\r\n")) if line < len(lines) else column + 1
    first_line_of_text = (error.text or "").split("\n", 1)[0]
    end = min(column + max(len(first_line_of_text), 1), max(line_length, column + 1))
    return Range(start=Position(line=line, character=column), end=Position(line=line, character=end))


def to_diagnostic(error: SchemeError, text: str) -> Diagnostic:
    return Diagnostic(
        range=error_range(error, text),
        message=error.message or error.kind,
        severity=DiagnosticSeverity.Error,
        source=SOURCE,
        code=error.kind,
    )


def collect_diagnostics(
    text: str,
    globals: Iterable[str] = (),
    settings: Optional[Settings] = None,
) -> List[Diagnostic]:
    settings = settings or Settings.from_env()
    builder = AstBuilder(globals=globals, settings=settings)
    try:
        for _ in build_forms(read_datums(text, settings), builder):
            pass
    except SchemeError as exc:
        return [to_diagnostic(exc, text)]
    return []
