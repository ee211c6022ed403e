from __future__ import annotations

"""
A minimal pygls-based Language Server for zscheme.

Features:
- Text synchronization (full documents) and a document store
- Diagnostics: lexical errors, unbalanced parentheses, malformed special
  forms and macro uses, and (with ZSCHEME_UNBOUND_POLICY=error) unbound names

Note: We never evaluate the buffer. Each change re-reads and re-builds it.
"""

import logging
from typing import Dict

from lsprotocol.types import (
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    TextDocumentSyncKind,
)
from pygls.server import LanguageServer

from zscheme import __version__
from zscheme.config import Settings
from zscheme_lsp.diagnostics import collect_diagnostics

logger = logging.getLogger(__name__)


class SchemeLanguageServer(LanguageServer):
    CMD_NAME = "zscheme-ls"

    def __init__(self):
        super().__init__(self.CMD_NAME, __version__, text_document_sync_kind=TextDocumentSyncKind.Full)
        self.documents: Dict[str, str] = {}


ls = SchemeLanguageServer()


# --- Text sync ---
@ls.feature("textDocument/didOpen")
def did_open(params: DidOpenTextDocumentParams):
    uri = params.text_document.uri
    ls.documents[uri] = params.text_document.text or ""
    _publish_diagnostics(uri)


@ls.feature("textDocument/didChange")
def did_change(params: DidChangeTextDocumentParams):
    uri = params.text_document.uri
    if params.content_changes:
        ls.documents[uri] = params.content_changes[-1].text
    _publish_diagnostics(uri)


@ls.feature("textDocument/didClose")
def did_close(params: DidCloseTextDocumentParams):
    uri = params.text_document.uri
    ls.documents.pop(uri, None)
    ls.publish_diagnostics(uri, [])


# --- Diagnostics ---
def _publish_diagnostics(uri: str):
    text = ls.documents.get(uri, "")
    diagnostics = collect_diagnostics(text)
    logger.debug("%s: %d diagnostic(s)", uri, len(diagnostics))
    ls.publish_diagnostics(uri, diagnostics)


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    ls.start_io()


if __name__ == "__main__":
    # Run the language server over stdio
    main()
