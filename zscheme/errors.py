from __future__ import annotations


class SchemeError(Exception):
    """ Base class for all zscheme errors"""

    kind = "error"

    def __init__(
        self,
        message: str = "",
        line: int | None = None,
        column: int | None = None,
        text: str | None = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.text = text
        super().__init__(str(self))

    @property
    def has_position(self) -> bool:
        return self.line is not None and self.column is not None

    def locate(self, line: int, column: int) -> SchemeError:
        """Tag a position-less error with (line, column); positioned errors are kept."""
        if not self.has_position:
            self.line, self.column = line, column
        return self

    def __str__(self) -> str:
        if self.has_position:
            rendered = f"{self.kind} at line {self.line}, column {self.column}"
            if self.text is not None:
                rendered += f', near "{self.text}"'
            if self.message:
                rendered += f": {self.message}"
            return rendered
        if self.message:
            return f"{self.kind}: {self.message}"
        return self.kind


class SchemeLexError(SchemeError):
    """ Raised when no token alternative matches the remaining input"""

    kind = "lex error"

    def __init__(
        self,
        remainder: str,
        reason: str = "no match",
        line: int | None = None,
        column: int | None = None,
    ):
        self.remainder = remainder
        self.reason = reason
        super().__init__(reason, line, column, remainder.rstrip("\r\n"))

    def at(self, line: int, column: int, remainder: str | None = None) -> SchemeLexError:
        """Copy of this error tagged with a source position."""
        if remainder is None:
            remainder = self.remainder
        return SchemeLexError(remainder, self.reason, line, column)


class TokenStreamEnded(SchemeError):
    """ Raised when the parser needs another token but the stream is exhausted"""

    kind = "token stream ended"


class UnexpectedToken(SchemeError):
    """ Raised when a token is not valid in its grammatical position"""

    kind = "unexpected token"


class MissingCloseParen(SchemeError):
    """ Raised when a list or vector is still open at the end of input"""

    kind = "missing close paren"


class SchemeSyntaxError(SchemeError):
    """ Raised when a form violates an AST-building or macro rule"""

    kind = "syntax error"


class UnboundVariable(SchemeSyntaxError):
    """ Raised for references to unbound names under the strict policy"""

    kind = "unbound variable"


class SchemeIOError(SchemeError):
    """ Raised when the underlying source cannot be opened or read"""

    kind = "io error"
