"""Core-language AST built from data by zscheme.analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from zscheme.types.datum import Datum
from zscheme.types.syntax_rules import SyntaxRules


@dataclass(frozen=True)
class Variable:
    """A variable reference or binding occurrence.

    scope is the arena index of the scope that binds the name, or None for a
    free (global) reference.
    """

    name: str
    scope: Optional[int] = None


@dataclass(frozen=True)
class SelfEvaluating:
    datum: Datum  # Boolean | Number | Character | String


@dataclass(frozen=True)
class Quotation:
    datum: Datum


@dataclass(frozen=True)
class ProcedureCall:
    operator: Expression
    operands: tuple[Expression, ...]


@dataclass(frozen=True)
class FixedArgs:
    """(lambda (a b) ...)"""

    variables: tuple[Variable, ...]


@dataclass(frozen=True)
class RestArgs:
    """(lambda args ...)"""

    variable: Variable


@dataclass(frozen=True)
class DottedArgs:
    """(lambda (a b . rest) ...)"""

    variables: tuple[Variable, ...]
    rest: Variable


LambdaArgs = Union[FixedArgs, RestArgs, DottedArgs]


@dataclass(frozen=True)
class Definition:
    variable: Variable
    expression: Expression


@dataclass(frozen=True)
class SyntaxDefinition:
    keyword: str
    transformer: SyntaxRules


@dataclass(frozen=True)
class LambdaBody:
    """Definitions, then commands, then exactly one return expression."""

    definitions: tuple[Union[Definition, SyntaxDefinition], ...]
    commands: tuple[Expression, ...]
    return_expression: Expression


@dataclass(frozen=True)
class Lambda:
    arguments: LambdaArgs
    body: LambdaBody
    scope: Optional[int] = None


@dataclass(frozen=True)
class Conditional:
    test: Expression
    consequent: Expression
    alternate: Optional[Expression] = None


@dataclass(frozen=True)
class Assignment:
    variable: Variable
    expression: Expression


@dataclass(frozen=True)
class Sequence:
    """(begin e1 e2 ...)"""

    expressions: tuple[Expression, ...]


@dataclass(frozen=True)
class MacroUse:
    """A macro use left unexpanded."""

    keyword: str
    data: tuple[Datum, ...]


@dataclass(frozen=True)
class MacroBlock:
    """let-syntax (recursive=False) or letrec-syntax (recursive=True)."""

    recursive: bool
    keywords: tuple[str, ...]
    body: LambdaBody


Expression = Union[
    Variable,
    SelfEvaluating,
    Quotation,
    ProcedureCall,
    Lambda,
    Conditional,
    Assignment,
    Sequence,
    MacroUse,
    MacroBlock,
]

TopLevelForm = Union[Expression, Definition, SyntaxDefinition]


@dataclass(frozen=True)
class Program:
    forms: tuple[TopLevelForm, ...]
