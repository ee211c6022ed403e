from types import SimpleNamespace

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    TextDocumentIdentifier,
    TextDocumentItem,
)

from zscheme.config import Settings
from zscheme_lsp import server
from zscheme_lsp.diagnostics import SOURCE, collect_diagnostics

URI = "file:///tmp/example.scm"


def test_clean_document_has_no_diagnostics():
    assert collect_diagnostics("(define (f x) x)\n(f 1)\n") == []


def test_unclosed_list():
    [diagnostic] = collect_diagnostics("(a")
    assert diagnostic.range.start == Position(line=0, character=0)
    assert diagnostic.range.end == Position(line=0, character=1)
    assert diagnostic.message == "'(' is never closed"
    assert diagnostic.code == "missing close paren"
    assert diagnostic.severity == DiagnosticSeverity.Error
    assert diagnostic.source == SOURCE


def test_syntax_error_range_covers_the_form():
    [diagnostic] = collect_diagnostics("x\n  (if)")
    assert diagnostic.range.start == Position(line=1, character=2)
    assert diagnostic.range.end == Position(line=1, character=6)
    assert diagnostic.code == "syntax error"


def test_lex_error():
    [diagnostic] = collect_diagnostics("(a ]")
    assert diagnostic.range.start == Position(line=0, character=3)
    assert diagnostic.code == "lex error"


def test_line_numbers_ignore_unicode_separators():
    [diagnostic] = collect_diagnostics('"a\u2028b" ; c\x0c\n(if)')
    assert diagnostic.range.start == Position(line=1, character=0)
    assert diagnostic.range.end == Position(line=1, character=4)


def test_only_the_first_error_is_reported():
    assert len(collect_diagnostics("(if)\n(if)\n")) == 1


def test_unbound_names_with_strict_policy():
    assert collect_diagnostics("y") == []
    [diagnostic] = collect_diagnostics("y", settings=Settings(unbound_policy="error"))
    assert diagnostic.code == "unbound variable"
    assert collect_diagnostics("y", globals=["y"], settings=Settings(unbound_policy="error")) == []


@pytest.fixture
def published(monkeypatch):
    calls = []
    monkeypatch.setattr(server.ls, "publish_diagnostics", lambda uri, diagnostics: calls.append((uri, diagnostics)))
    yield calls
    server.ls.documents.clear()


def test_document_lifecycle(published):
    server.did_open(
        DidOpenTextDocumentParams(
            text_document=TextDocumentItem(uri=URI, language_id="scheme", version=1, text="(a")
        )
    )
    assert server.ls.documents[URI] == "(a"
    uri, diagnostics = published[-1]
    assert uri == URI and len(diagnostics) == 1

    # only the fields the handler reads
    server.did_change(
        SimpleNamespace(text_document=SimpleNamespace(uri=URI), content_changes=[SimpleNamespace(text="(a)")])
    )
    assert server.ls.documents[URI] == "(a)"
    assert published[-1] == (URI, [])

    server.did_close(DidCloseTextDocumentParams(text_document=TextDocumentIdentifier(uri=URI)))
    assert URI not in server.ls.documents
    assert published[-1] == (URI, [])
