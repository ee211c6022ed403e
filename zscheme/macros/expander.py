"""Expansion of one macro use by a syntax-rules transformer.

The first rule whose pattern matches the arguments of the use is selected and
its template instantiated. Identifiers written literally in the template get
a fresh alias per expansion (the same alias for every occurrence), so that
bindings introduced by the template can neither capture nor be captured by
names at the use site.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from zscheme.errors import SchemeSyntaxError
from zscheme.macros.hygiene import FreshNames, base_name
from zscheme.macros.matcher import Bound, Repeated, match_pattern
from zscheme.types.datum import Datum, Identifier, List, Vector, make_list
from zscheme.types.scope import RESERVED_KEYWORDS
from zscheme.types.syntax_rules import (
    ELLIPSIS,
    SyntaxRules,
    Template,
    TemplateDatum,
    TemplateElement,
    TemplateEllipsis,
    TemplateIdentifier,
    TemplateList,
    TemplatePair,
    TemplateVector,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Expansion:
    """The expanded datum and the aliases it introduced (alias -> original name)."""

    datum: Datum
    aliases: dict[str, str] = field(default_factory=dict)


def template_variables(element: TemplateElement) -> list[str]:
    if isinstance(element, TemplateEllipsis):
        return template_variables(element.template)
    if isinstance(element, TemplateIdentifier):
        return [element.name]
    if isinstance(element, (TemplateList, TemplateVector)):
        return [name for child in element.elements for name in template_variables(child)]
    if isinstance(element, TemplatePair):
        names = [name for child in element.elements for name in template_variables(child)]
        return names + template_variables(element.tail)
    return []


class Instantiator:
    def __init__(self, fresh: FreshNames, keywords: frozenset[str] = RESERVED_KEYWORDS):
        self.fresh = fresh
        self.keywords = keywords
        self.renames: dict[str, str] = {}

    def rename(self, name: str) -> str:
        alias = self.renames.get(name)
        if alias is None:
            alias = self.renames[name] = self.fresh.fresh(name)
        return alias

    def instantiate(self, template: Template, bindings: dict[str, Bound]) -> Datum:
        if isinstance(template, TemplateIdentifier):
            name = template.name
            if name in bindings:
                value = bindings[name]
                if isinstance(value, Repeated):
                    raise SchemeSyntaxError(f"pattern variable '{name}' is used without '...'", text=name)
                return value
            if base_name(name) in self.keywords or name == ELLIPSIS:
                return Identifier(name)
            return Identifier(self.rename(name))
        if isinstance(template, TemplateDatum):
            return template.datum
        if isinstance(template, TemplateList):
            return List(tuple(self.elements(template.elements, bindings)))
        if isinstance(template, TemplateVector):
            return Vector(tuple(self.elements(template.elements, bindings)))
        if isinstance(template, TemplatePair):
            return make_list(self.elements(template.elements, bindings), self.instantiate(template.tail, bindings))
        raise SchemeSyntaxError(f"invalid template {template!r}")

    def elements(self, elements: tuple[TemplateElement, ...], bindings: dict[str, Bound]) -> list[Datum]:
        out: list[Datum] = []
        for element in elements:
            if isinstance(element, TemplateEllipsis):
                out.extend(self.repeat(element, bindings))
            else:
                out.append(self.instantiate(element, bindings))
        return out

    def repeat(self, element: TemplateEllipsis, bindings: dict[str, Bound]) -> list[Datum]:
        inner = element.template
        names = [n for n in dict.fromkeys(template_variables(inner)) if isinstance(bindings.get(n), Repeated)]
        if not names:
            raise SchemeSyntaxError("'...' follows a template without ellipsis pattern variables")
        counts = {len(bindings[n]) for n in names}
        if len(counts) != 1:
            raise SchemeSyntaxError(
                f"pattern variables {', '.join(names)} repeat a different number of times under '...'"
            )
        out: list[Datum] = []
        for i in range(counts.pop()):
            step = dict(bindings)
            for n in names:
                step[n] = bindings[n][i]
            if isinstance(inner, TemplateEllipsis):
                out.extend(self.repeat(inner, step))
            else:
                out.append(self.instantiate(inner, step))
        return out


def expand(
    transformer: SyntaxRules,
    form: Datum,
    fresh: FreshNames,
    keywords: frozenset[str] = RESERVED_KEYWORDS,
) -> Expansion:
    """Expand the macro use `form`, a list headed by the macro keyword."""
    if not isinstance(form, List) or not form.items:
        raise SchemeSyntaxError("a macro use must be a non-empty list", text=str(form))
    keyword = form.items[0]
    arguments = List(form.items[1:])

    for index, rule in enumerate(transformer.rules):
        bindings = match_pattern(rule.pattern, arguments, transformer.literals)
        if bindings is None:
            continue
        instantiator = Instantiator(fresh, keywords)
        datum = instantiator.instantiate(rule.template, bindings)
        logger.debug("expanded %s with rule %d into %s", form, index, datum)
        aliases = {alias: original for original, alias in instantiator.renames.items()}
        return Expansion(datum, aliases)

    raise SchemeSyntaxError(
        f"no syntax-rules pattern of '{base_name(str(keyword))}' matches this use", text=str(form)
    )
