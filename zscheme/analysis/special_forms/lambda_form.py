from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.errors import SchemeSyntaxError
from zscheme.types.datum import Datum, DottedPair, Identifier, List
from zscheme.types.expression import DottedArgs, FixedArgs, Lambda, LambdaArgs, RestArgs, Variable

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def _bind_formals(builder: AstBuilder, formals: Datum, scope: int) -> LambdaArgs:
    """Bind every formal in `scope`; the body is built only afterwards."""
    if isinstance(formals, Identifier):
        return RestArgs(builder.bind(formals, scope))

    if isinstance(formals, List):
        names, rest = formals.items, None
    elif isinstance(formals, DottedPair):
        names, rest = formals.items, formals.tail
    else:
        raise SchemeSyntaxError(f"invalid lambda formals {formals}", text=str(formals))

    seen: set[str] = set()
    variables: list[Variable] = []
    for formal in names + ((rest,) if rest is not None else ()):
        if not isinstance(formal, Identifier):
            raise SchemeSyntaxError(f"lambda formal must be an identifier, got {formal}", text=str(formals))
        if formal.name in seen:
            raise SchemeSyntaxError(f"duplicate lambda formal '{formal.name}'", text=str(formals))
        seen.add(formal.name)
        variables.append(builder.bind(formal, scope))

    if rest is None:
        return FixedArgs(tuple(variables))
    return DottedArgs(tuple(variables[:-1]), variables[-1])


def build_lambda(builder: AstBuilder, formals: Datum, body: tuple[Datum, ...], scope: int) -> Lambda:
    if not body:
        raise SchemeSyntaxError("lambda requires at least one body expression")
    inner = builder.arena.new_scope(scope)
    arguments = _bind_formals(builder, formals, inner)
    return Lambda(arguments, builder.build_body(body, inner), inner)


def lambda_form(builder: AstBuilder, form: List, scope: int) -> Lambda:
    """
    (lambda formals body...)

    formals is a single identifier (all arguments as a list), a proper list
    of identifiers, or a dotted list of identifiers ending in the rest name.
    """
    tail = form.items[1:]
    if len(tail) < 2:
        raise SchemeSyntaxError("lambda requires formals and a body", text=str(form))
    return build_lambda(builder, tail[0], tail[1:], scope)
