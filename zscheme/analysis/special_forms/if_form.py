from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.errors import SchemeSyntaxError
from zscheme.types.datum import List
from zscheme.types.expression import Conditional

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def if_form(builder: AstBuilder, form: List, scope: int) -> Conditional:
    tail = form.items[1:]
    if len(tail) not in (2, 3):
        raise SchemeSyntaxError("if requires a test, a consequent and an optional alternate", text=str(form))
    test, consequent = (builder.build_expression(d, scope) for d in tail[:2])
    alternate = builder.build_expression(tail[2], scope) if len(tail) == 3 else None
    return Conditional(test, consequent, alternate)
