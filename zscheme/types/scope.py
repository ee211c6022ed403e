"""Lexical scopes for the AST builder.

Scopes live in an arena and refer to their parent by index, so a scope chain
is walked by following parent indices up to the root (index 0). Each scope
holds the variable names and the macro keywords it binds. The first scope on
the walk that binds a name, as either kind, decides its meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from zscheme.errors import SchemeSyntaxError
from zscheme.types.syntax_rules import SyntaxRules

RESERVED_KEYWORDS: frozenset[str] = frozenset(
    {
        "lambda",
        "if",
        "quote",
        "begin",
        "set!",
        "let-syntax",
        "letrec-syntax",
        "syntax-rules",
        "define",
        "define-syntax",
    }
)

ROOT = 0


@dataclass
class Scope:
    parent: Optional[int]
    variables: set[str] = field(default_factory=set)
    macros: dict[str, SyntaxRules] = field(default_factory=dict)

    def binds(self, name: str) -> bool:
        return name in self.variables or name in self.macros


@dataclass(frozen=True)
class Binding:
    """Where a name was found: the scope index and the macro, if it is one."""

    scope: int
    macro: Optional[SyntaxRules] = None

    @property
    def is_macro(self) -> bool:
        return self.macro is not None


class ScopeArena:
    def __init__(self, keywords: frozenset[str] = RESERVED_KEYWORDS, globals: Iterable[str] = ()):
        self.keywords = keywords
        self.scopes: list[Scope] = [Scope(parent=None)]
        for name in globals:
            self.bind_variable(ROOT, name)

    def new_scope(self, parent: int) -> int:
        self.scopes.append(Scope(parent=parent))
        return len(self.scopes) - 1

    def __getitem__(self, index: int) -> Scope:
        return self.scopes[index]

    def chain(self, index: Optional[int]) -> Iterator[int]:
        """Scope indices from `index` outward to the root."""
        while index is not None:
            yield index
            index = self.scopes[index].parent

    def _check_bindable(self, name: str) -> None:
        if name in self.keywords:
            raise SchemeSyntaxError(f"reserved keyword '{name}' cannot be bound")

    def bind_variable(self, index: int, name: str) -> None:
        self._check_bindable(name)
        scope = self.scopes[index]
        scope.macros.pop(name, None)
        scope.variables.add(name)

    def bind_macro(self, index: int, name: str, transformer: SyntaxRules) -> None:
        self._check_bindable(name)
        scope = self.scopes[index]
        scope.variables.discard(name)
        scope.macros[name] = transformer

    def lookup(self, index: Optional[int], name: str) -> Optional[Binding]:
        for i in self.chain(index):
            scope = self.scopes[i]
            if name in scope.variables:
                return Binding(i)
            if name in scope.macros:
                return Binding(i, scope.macros[name])
        return None
