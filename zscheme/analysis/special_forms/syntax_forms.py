from __future__ import annotations

from typing import TYPE_CHECKING

from zscheme.errors import SchemeSyntaxError
from zscheme.types.datum import Identifier, List
from zscheme.types.expression import MacroBlock, SyntaxDefinition

if TYPE_CHECKING:
    from zscheme.analysis.builder import AstBuilder


def build_syntax_definition(builder: AstBuilder, form: List, scope: int) -> SyntaxDefinition:
    """
    (define-syntax keyword (syntax-rules ...))

    The keyword is bound in `scope` at once. The transformer is defined in
    `scope` too, so it may refer to itself.
    """
    tail = form.items[1:]
    if len(tail) != 2 or not isinstance(tail[0], Identifier):
        raise SchemeSyntaxError(
            "define-syntax requires a keyword and a transformer: (define-syntax keyword spec)", text=str(form)
        )
    keyword, spec = tail
    transformer = builder.compile_transformer(spec, scope)
    builder.arena.bind_macro(scope, keyword.name, transformer)
    return SyntaxDefinition(keyword.name, transformer)


def define_syntax_form(builder: AstBuilder, form: List, scope: int):
    raise SchemeSyntaxError(
        "define-syntax is only allowed at the top level or at the beginning of a body", text=str(form)
    )


def _macro_block(builder: AstBuilder, form: List, scope: int, recursive: bool) -> MacroBlock:
    name = form.items[0].name
    tail = form.items[1:]
    if len(tail) < 2 or not isinstance(tail[0], List):
        raise SchemeSyntaxError(f"{name} requires a binding list and a body", text=str(form))

    inner = builder.arena.new_scope(scope)
    # letrec-syntax transformers see each other; let-syntax ones see the enclosing scope.
    definition_scope = inner if recursive else scope
    keywords: list[str] = []
    for binding in tail[0].items:
        if not (isinstance(binding, List) and len(binding.items) == 2 and isinstance(binding.items[0], Identifier)):
            raise SchemeSyntaxError(f"invalid {name} binding {binding}", text=str(binding))
        keyword, spec = binding.items
        if keyword.name in keywords:
            raise SchemeSyntaxError(f"'{keyword.name}' is bound twice in {name}", text=str(binding))
        keywords.append(keyword.name)
        builder.arena.bind_macro(inner, keyword.name, builder.compile_transformer(spec, definition_scope))

    return MacroBlock(recursive, tuple(keywords), builder.build_body(tail[1:], inner))


def let_syntax_form(builder: AstBuilder, form: List, scope: int) -> MacroBlock:
    return _macro_block(builder, form, scope, recursive=False)


def letrec_syntax_form(builder: AstBuilder, form: List, scope: int) -> MacroBlock:
    return _macro_block(builder, form, scope, recursive=True)


def syntax_rules_form(builder: AstBuilder, form: List, scope: int):
    raise SchemeSyntaxError("syntax-rules is only valid as a macro transformer", text=str(form))
