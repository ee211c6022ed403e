import pytest

from zscheme.compiler import compile_file, compile_source, parse_all
from zscheme.errors import SchemeIOError, SchemeLexError, SchemeSyntaxError
from zscheme.reader.source import FileLexer, PositionalReader, read_tokens, source_lines
from zscheme.reader.tokens import Integer, Token, TokenKind
from zscheme.types.datum import Number, String


def _positions(reader):
    return [(t.lexeme, t.line, t.column) for t in reader]


def test_lines_are_one_based_columns_zero_based():
    assert _positions(read_tokens("(a\n  b)")) == [
        ("(", 1, 0),
        ("a", 1, 1),
        ("\n", 1, 2),
        ("  ", 2, 0),
        ("b", 2, 2),
        (")", 2, 3),
    ]


def test_columns_count_source_characters_of_escapes():
    assert _positions(read_tokens('"a\\"b" x')) == [('"a\\"b"', 1, 0), (" ", 1, 6), ("x", 1, 7)]


def test_tokens_keep_their_values():
    tokens = [t.token for t in read_tokens("(+ 1 #t)")]
    assert tokens == [
        Token(TokenKind.PUNCTUATOR, "("),
        Token(TokenKind.IDENTIFIER, "+"),
        Token(TokenKind.WHITESPACE),
        Token(TokenKind.NUMBER, Integer(1)),
        Token(TokenKind.WHITESPACE),
        Token(TokenKind.BOOLEAN, True),
        Token(TokenKind.PUNCTUATOR, ")"),
    ]


def test_empty_input_yields_nothing():
    assert list(read_tokens("")) == []
    assert list(PositionalReader(["", ""])) == []


def test_lex_error_is_positioned_and_fails_fast():
    reader = read_tokens("(a\n  ]")
    assert [t.lexeme for t in (next(reader), next(reader), next(reader), next(reader))] == ["(", "a", "\n", "  "]
    with pytest.raises(SchemeLexError) as exc:
        next(reader)
    assert (exc.value.line, exc.value.column) == (2, 2)
    assert exc.value.remainder == "]"
    assert "line 2, column 2" in str(exc.value)
    with pytest.raises(StopIteration):
        next(reader)


def test_read_failure_becomes_io_error():
    def lines():
        yield "a\n"
        raise OSError("device gone")

    reader = PositionalReader(lines())
    assert next(reader).lexeme == "a"
    assert next(reader).lexeme == "\n"
    with pytest.raises(SchemeIOError):
        next(reader)
    assert list(reader) == []


def test_file_lexer_reads_and_closes(tmp_path):
    path = tmp_path / "prog.scm"
    path.write_text("(define x 1)\n; done\n", encoding="utf-8")
    lexer = FileLexer(path)
    tokens = list(lexer)
    assert tokens[0].lexeme == "("
    assert tokens[-1].token.kind is TokenKind.COMMENT
    assert tokens[-1].line == 2
    assert lexer._handle.closed


def test_file_lexer_as_context_manager(tmp_path):
    path = tmp_path / "prog.scm"
    path.write_text("a b c", encoding="utf-8")
    with FileLexer(path) as lexer:
        first = next(lexer)
    assert first.lexeme == "a"
    assert lexer._handle.closed


def test_file_lexer_missing_file(tmp_path):
    with pytest.raises(SchemeIOError) as exc:
        FileLexer(tmp_path / "missing.scm")
    assert "missing.scm" in str(exc.value)


def test_file_lexer_decode_error(tmp_path):
    path = tmp_path / "bad.scm"
    path.write_bytes(b"a \xff\xfe\n")
    with pytest.raises(SchemeIOError):
        list(FileLexer(path))


def test_compile_file(tmp_path):
    path = tmp_path / "prog.scm"
    path.write_text("(define (id x) x)\n(id 1)\n", encoding="utf-8")
    program = compile_file(path)
    assert len(program.forms) == 2
    assert program.forms[1].operator.name == "id"


def test_compile_missing_file(tmp_path):
    with pytest.raises(SchemeIOError):
        compile_file(tmp_path / "nope.scm")


def test_compile_file_reports_error_position(tmp_path):
    path = tmp_path / "bad.scm"
    path.write_text("(define x 1)\n\n   (lambda (x x) x)\n", encoding="utf-8")
    with pytest.raises(SchemeSyntaxError) as exc:
        compile_file(path)
    assert (exc.value.line, exc.value.column) == (3, 3)


def test_source_lines_split_only_on_newlines():
    assert source_lines("a\x0cb\nc\r\nd\re\u2028f") == ["a\x0cb\n", "c\r\n", "d\r", "e\u2028f"]


@pytest.mark.parametrize(
    "source,expected",
    [
        ('"a\u2028b"', [String("a\u2028b")]),
        ('"page\x0cbreak"', [String("page\x0cbreak")]),
        ("; page\x0c (oops\n1", [Number(Integer(1))]),
        ("; sep\u2028 (oops\n1", [Number(Integer(1))]),
    ],
)
def test_unicode_line_separators_do_not_end_lines(source, expected):
    assert parse_all(source) == expected


def test_in_memory_and_file_sources_agree(tmp_path):
    text = '(define s "x\u2028y") ; note\x0c (\ns\n'
    path = tmp_path / "seps.scm"
    path.write_text(text, encoding="utf-8", newline="")
    assert compile_file(path) == compile_source(text)
