from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.errors import SchemeSyntaxError
from zscheme.types.datum import Identifier, List
from zscheme.types.expression import Assignment

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def set_form(builder: AstBuilder, form: List, scope: int) -> Assignment:
    tail = form.items[1:]
    if len(tail) != 2:
        raise SchemeSyntaxError("set! requires exactly 2 operands: (set! var expr)", text=str(form))
    var, expr = tail
    if not isinstance(var, Identifier):
        raise SchemeSyntaxError(f"set! first operand must be an identifier, got {var}", text=str(form))
    variable = builder.reference(var, scope)
    return Assignment(variable, builder.build_expression(expr, scope))
