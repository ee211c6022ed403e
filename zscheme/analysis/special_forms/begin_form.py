from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.errors import SchemeSyntaxError
from zscheme.types.datum import List
from zscheme.types.expression import Sequence

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def begin_form(builder: AstBuilder, form: List, scope: int) -> Sequence:
    # Top-level and body begins that splice definitions are handled by the builder.
    tail = form.items[1:]
    if not tail:
        raise SchemeSyntaxError("begin requires at least one expression", text=str(form))
    return Sequence(tuple(builder.build_expression(d, scope) for d in tail))
