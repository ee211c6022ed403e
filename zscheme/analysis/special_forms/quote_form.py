from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.errors import SchemeSyntaxError
from zscheme.macros.hygiene import strip_aliases
from zscheme.types.datum import List
from zscheme.types.expression import Quotation

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def quote_form(builder: AstBuilder, form: List, scope: int) -> Quotation:
    """
    (quote datum)
    The datum is taken verbatim: nothing inside it is resolved or bound.
    """
    tail = form.items[1:]
    if len(tail) != 1:
        raise SchemeSyntaxError("quote requires exactly 1 operand: (quote datum)", text=str(form))
    return Quotation(strip_aliases(tail[0]))
