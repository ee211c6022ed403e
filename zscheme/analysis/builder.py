"""Scope resolution and AST construction.

AstBuilder turns data into Expressions. It owns the scope arena, the fresh
name counter used for macro hygiene and the table of aliases produced by
expansions. Special forms are dispatched through SPECIAL_FORMS; any other
list is either a macro use (expanded and rebuilt until its head is no longer
a macro keyword) or a procedure call.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Optional

from zscheme.analysis.special_forms import SPECIAL_FORMS
from zscheme.analysis.special_forms.define_form import build_definition, definition_target
from zscheme.analysis.special_forms.syntax_forms import build_syntax_definition
from zscheme.config import Settings
from zscheme.errors import SchemeSyntaxError, UnboundVariable
from zscheme.macros.expander import expand
from zscheme.macros.hygiene import Alias, FreshNames, base_name, strip_aliases
from zscheme.macros.rules import compile_syntax_rules
from zscheme.types.datum import (
    ABBREVIATIONS,
    ATOMS,
    Datum,
    DottedPair,
    Identifier,
    List,
    Quote,
    Vector,
)
from zscheme.types.expression import (
    Expression,
    LambdaBody,
    MacroUse,
    ProcedureCall,
    Program,
    Quotation,
    SelfEvaluating,
    SyntaxDefinition,
    TopLevelForm,
    Variable,
)
from zscheme.types.scope import RESERVED_KEYWORDS, ROOT, Binding, ScopeArena
from zscheme.types.syntax_rules import SyntaxRules

logger = logging.getLogger(__name__)


class AstBuilder:
    """Builds Expressions from data, threading a chain of lexical scopes.

    keywords is the reserved keyword set; globals are names pre-bound in the
    root scope (primitives supplied by the evaluator). With expand_macros
    False, macro uses are left in the tree as MacroUse nodes.
    """

    def __init__(
        self,
        keywords: frozenset[str] = RESERVED_KEYWORDS,
        globals: Iterable[str] = (),
        settings: Optional[Settings] = None,
        expand_macros: bool = True,
    ):
        self.keywords = keywords
        self.settings = settings or Settings.from_env()
        self.arena = ScopeArena(keywords, globals)
        self.fresh = FreshNames()
        self.aliases: dict[str, Alias] = {}
        self.expand_macros = expand_macros

    # --- Name resolution ---

    def resolve(self, name: str, scope: int) -> tuple[str, Optional[Binding]]:
        """The name a reference denotes and its binding, if any.

        An alias introduced by a macro expansion that nothing binds refers to
        its original name as seen from the scope the macro was defined in.
        """
        binding = self.arena.lookup(scope, name)
        if binding is not None:
            return name, binding
        alias = self.aliases.get(name)
        if alias is not None:
            return self.resolve(alias.original, alias.scope)
        return name, None

    def special_keyword(self, datum: Datum) -> Optional[str]:
        """The reserved keyword heading `datum`, if it is a special form."""
        if isinstance(datum, List) and datum.items:
            head = datum.items[0]
            if isinstance(head, Identifier) and head.name in self.keywords:
                return head.name
        return None

    def macro_transformer(self, datum: Datum, scope: int) -> Optional[SyntaxRules]:
        if isinstance(datum, List) and datum.items and isinstance(datum.items[0], Identifier):
            head = datum.items[0].name
            if head in self.keywords:
                return None
            _, binding = self.resolve(head, scope)
            if binding is not None and binding.is_macro:
                return binding.macro
        return None

    def reference(self, identifier: Datum, scope: int) -> Variable:
        if not isinstance(identifier, Identifier):
            raise SchemeSyntaxError(f"expected an identifier, got {identifier}", text=str(identifier))
        if identifier.name in self.keywords:
            raise SchemeSyntaxError(
                f"reserved keyword '{identifier.name}' cannot be used as a variable", text=identifier.name
            )
        name, binding = self.resolve(identifier.name, scope)
        if binding is None:
            if self.settings.unbound_policy == "error":
                raise UnboundVariable(f"'{base_name(name)}' is not bound", text=base_name(name))
            return Variable(name)
        if binding.is_macro:
            raise SchemeSyntaxError(
                f"macro keyword '{base_name(name)}' cannot be used as a variable", text=base_name(name)
            )
        return Variable(name, binding.scope)

    def bind(self, identifier: Datum, scope: int) -> Variable:
        if not isinstance(identifier, Identifier):
            raise SchemeSyntaxError(f"expected an identifier to bind, got {identifier}", text=str(identifier))
        self.arena.bind_variable(scope, identifier.name)
        return Variable(identifier.name, scope)

    # --- Macros ---

    def compile_transformer(self, spec: Datum, scope: int) -> SyntaxRules:
        return compile_syntax_rules(spec, scope)

    def expand_once(self, form: List, transformer: SyntaxRules) -> Datum:
        expansion = expand(transformer, form, self.fresh, self.keywords)
        for alias, original in expansion.aliases.items():
            self.aliases[alias] = Alias(original, transformer.scope)
        return expansion.datum

    def expand_head(self, datum: Datum, scope: int) -> Datum:
        """Expand `datum` until it is no longer a macro use.

        Only the re-expansions of this one form count against max_expansions;
        macro uses nested inside the result are expanded when they are built.
        """
        if not self.expand_macros:
            return datum
        steps = 0
        transformer = self.macro_transformer(datum, scope)
        while transformer is not None:
            steps += 1
            if steps > self.settings.max_expansions:
                raise SchemeSyntaxError(
                    f"more than {self.settings.max_expansions} macro expansions of one form",
                    text=base_name(str(datum.items[0])),
                )
            datum = self.expand_once(datum, transformer)
            transformer = self.macro_transformer(datum, scope)
        return datum

    # --- Expressions ---

    def build_expression(self, datum: Datum, scope: int = ROOT) -> Expression:
        if isinstance(datum, Identifier):
            return self.reference(datum, scope)
        if isinstance(datum, ATOMS):
            return SelfEvaluating(datum)
        if isinstance(datum, Quote):
            return Quotation(strip_aliases(datum.datum))
        if type(datum) in ABBREVIATIONS:
            raise SchemeSyntaxError("quasiquotation is not supported", text=str(datum))
        if isinstance(datum, Vector):
            raise SchemeSyntaxError("a vector must be quoted", text=str(datum))
        if isinstance(datum, DottedPair):
            raise SchemeSyntaxError("a dotted list is not an expression", text=str(datum))
        if not datum.items:
            raise SchemeSyntaxError("the empty combination () is not an expression", text=str(datum))

        keyword = self.special_keyword(datum)
        if keyword is not None:
            return SPECIAL_FORMS[keyword](self, datum, scope)

        transformer = self.macro_transformer(datum, scope)
        if transformer is not None:
            if not self.expand_macros:
                return MacroUse(datum.items[0].name, datum.items[1:])
            return self.build_expression(self.expand_head(datum, scope), scope)

        operator = self.build_expression(datum.items[0], scope)
        operands = tuple(self.build_expression(d, scope) for d in datum.items[1:])
        return ProcedureCall(operator, operands)

    def build_body(self, forms: Iterable[Datum], scope: int) -> LambdaBody:
        """Definitions first, then commands, then one return expression.

        Every name defined in the body is bound in `scope` before any of the
        definitions' values or the commands are built.
        """
        queue = deque(forms)
        definitions: list = []
        defined: set[str] = set()
        commands: list[Datum] = []
        while queue:
            form = self.expand_head(queue.popleft(), scope)
            keyword = self.special_keyword(form)
            if commands:
                if keyword in ("define", "define-syntax"):
                    raise SchemeSyntaxError("a definition follows an expression in a body", text=str(form))
                commands.append(form)
            elif keyword == "define":
                target = definition_target(form)
                if target.name in defined:
                    raise SchemeSyntaxError(f"'{base_name(target.name)}' is defined twice in one body", text=str(form))
                defined.add(target.name)
                self.bind(target, scope)
                definitions.append(form)
            elif keyword == "define-syntax":
                definitions.append(build_syntax_definition(self, form, scope))
            elif keyword == "begin" and len(form.items) > 1:
                queue.extendleft(reversed(form.items[1:]))
            else:
                commands.append(form)

        if not commands:
            raise SchemeSyntaxError("a body needs at least one expression")

        built = tuple(
            d if isinstance(d, SyntaxDefinition) else build_definition(self, d, scope)
            for d in definitions
        )
        return LambdaBody(
            definitions=built,
            commands=tuple(self.build_expression(c, scope) for c in commands[:-1]),
            return_expression=self.build_expression(commands[-1], scope),
        )

    # --- Top level ---

    def build_toplevel(self, datum: Datum) -> list[TopLevelForm]:
        """Build one top-level datum; a top-level begin splices its forms."""
        logger.debug("building top-level form %s", datum)
        try:
            return self._toplevel(datum)
        except RecursionError:
            # a macro whose expansion keeps nesting further uses of itself
            raise SchemeSyntaxError("macro expansion nests too deeply", text=str(datum)) from None

    def _toplevel(self, datum: Datum) -> list[TopLevelForm]:
        form = self.expand_head(datum, ROOT)
        keyword = self.special_keyword(form)
        if keyword == "begin":
            forms: list[TopLevelForm] = []
            for sub in form.items[1:]:
                forms.extend(self._toplevel(sub))
            return forms
        if keyword == "define":
            self.bind(definition_target(form), ROOT)
            return [build_definition(self, form, ROOT)]
        if keyword == "define-syntax":
            return [build_syntax_definition(self, form, ROOT)]
        return [self.build_expression(form, ROOT)]

    def build_program(self, data: Iterable[Datum]) -> Program:
        forms: list[TopLevelForm] = []
        for datum in data:
            forms.extend(self.build_toplevel(datum))
        return Program(tuple(forms))
