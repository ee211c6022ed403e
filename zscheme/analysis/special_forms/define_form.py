from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.analysis.special_forms.lambda_form import build_lambda
from zscheme.errors import SchemeSyntaxError
from zscheme.types.datum import DottedPair, Identifier, List, make_list
from zscheme.types.expression import Definition, Variable

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def definition_target(form: List) -> Identifier:
    """The name defined by (define name expr) or (define (name . formals) body...)."""
    tail = form.items[1:]
    if not tail:
        raise SchemeSyntaxError("define requires a name", text=str(form))
    target = tail[0]
    if isinstance(target, (List, DottedPair)) and target.items:
        target = target.items[0]
    if not isinstance(target, Identifier):
        raise SchemeSyntaxError(f"define requires an identifier, got {target}", text=str(form))
    return target


def build_definition(builder: AstBuilder, form: List, scope: int) -> Definition:
    """
    (define name expr)
    (define (name . formals) body...) == (define name (lambda formals body...))

    The caller binds the name in `scope` beforehand, so the value may refer
    to it recursively.
    """
    target = definition_target(form)
    variable = Variable(target.name, scope)
    head, tail = form.items[1], form.items[2:]

    if isinstance(head, Identifier):
        if len(tail) != 1:
            raise SchemeSyntaxError("define requires exactly 1 value: (define name expr)", text=str(form))
        return Definition(variable, builder.build_expression(tail[0], scope))

    formals = make_list(head.items[1:], head.tail if isinstance(head, DottedPair) else None)
    return Definition(variable, build_lambda(builder, formals, tail, scope))


def define_form(builder: AstBuilder, form: List, scope: int):
    raise SchemeSyntaxError(
        "define is only allowed at the top level or at the beginning of a body", text=str(form)
    )
