"""Compile `(syntax-rules (literal ...) (pattern template) ...)` data."""

from __future__ import annotations

from zscheme.errors import SchemeSyntaxError
from zscheme.macros.hygiene import base_name
from zscheme.types.datum import (
    ATOMS,
    ABBREVIATIONS,
    Datum,
    DottedPair,
    Identifier,
    List,
    Vector,
    expand_abbreviation,
    make_list,
)
from zscheme.types.syntax_rules import (
    ELLIPSIS,
    WILDCARD,
    Pattern,
    PatternDatum,
    PatternEllipsis,
    PatternIdentifier,
    PatternList,
    PatternPair,
    PatternVector,
    SyntaxRule,
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


def _is_ellipsis(datum: Datum) -> bool:
    return isinstance(datum, Identifier) and base_name(datum.name) == ELLIPSIS


def compile_syntax_rules(form: Datum, scope: int = 0) -> SyntaxRules:
    """Compile a syntax-rules transformer defined in the scope `scope`."""
    if not (
        isinstance(form, List)
        and form.items
        and isinstance(form.items[0], Identifier)
        and form.items[0].name == "syntax-rules"
    ):
        raise SchemeSyntaxError("only syntax-rules transformers are supported", text=str(form))
    if len(form.items) < 2 or not isinstance(form.items[1], List):
        raise SchemeSyntaxError("syntax-rules requires a literal list", text=str(form))

    literals = set()
    for literal in form.items[1].items:
        if not isinstance(literal, Identifier) or _is_ellipsis(literal):
            raise SchemeSyntaxError(f"invalid syntax-rules literal {literal}", text=str(form))
        literals.add(literal.name)

    rules = tuple(_compile_rule(rule, frozenset(literals)) for rule in form.items[2:])
    return SyntaxRules(frozenset(literals), rules, scope)


def _compile_rule(rule: Datum, literals: frozenset[str]) -> SyntaxRule:
    if not isinstance(rule, List) or len(rule.items) != 2:
        raise SchemeSyntaxError("a syntax rule is a (pattern template) pair", text=str(rule))
    pattern_datum, template_datum = rule.items

    # The keyword position of a pattern is ignored.
    if isinstance(pattern_datum, List) and pattern_datum.items:
        arguments = List(pattern_datum.items[1:])
    elif isinstance(pattern_datum, DottedPair):
        arguments = make_list(pattern_datum.items[1:], pattern_datum.tail)
    else:
        raise SchemeSyntaxError("a syntax rule pattern must be a non-empty list", text=str(pattern_datum))

    depths: dict[str, int] = {}
    pattern = _compile_pattern(arguments, literals, depths, 0)
    template = _compile_template(template_datum)
    _check_template_depths(template, depths, 0)
    return SyntaxRule(pattern, template)


# --- Patterns ---

def _compile_pattern(datum: Datum, literals: frozenset[str], depths: dict[str, int], depth: int) -> Pattern:
    keyword = ABBREVIATIONS.get(type(datum))
    if keyword is not None:
        # 'x matches (quote x): the keyword is never a pattern variable
        return PatternList((
            PatternDatum(Identifier(keyword)),
            _compile_pattern(datum.datum, literals, depths, depth),
        ))

    if isinstance(datum, Identifier):
        if _is_ellipsis(datum):
            raise SchemeSyntaxError("'...' must follow a pattern element", text=datum.name)
        if datum.name not in literals and datum.name != WILDCARD:
            if datum.name in depths:
                raise SchemeSyntaxError(f"pattern variable '{datum.name}' appears twice", text=datum.name)
            depths[datum.name] = depth
        return PatternIdentifier(datum.name)

    if isinstance(datum, ATOMS):
        return PatternDatum(datum)

    if isinstance(datum, (List, Vector)):
        vector = isinstance(datum, Vector)
        items = datum.items
        marks = [i for i, item in enumerate(items) if _is_ellipsis(item)]
        if not marks:
            compiled = tuple(_compile_pattern(d, literals, depths, depth) for d in items)
            return PatternVector(compiled) if vector else PatternList(compiled)
        if len(marks) > 1 or marks[0] == 0:
            raise SchemeSyntaxError("'...' must follow exactly one pattern element", text=str(datum))
        mark = marks[0]
        return PatternEllipsis(
            prefix=tuple(_compile_pattern(d, literals, depths, depth) for d in items[: mark - 1]),
            repeated=_compile_pattern(items[mark - 1], literals, depths, depth + 1),
            suffix=tuple(_compile_pattern(d, literals, depths, depth) for d in items[mark + 1:]),
            vector=vector,
        )

    if isinstance(datum, DottedPair):
        if any(_is_ellipsis(d) for d in datum.items) or _is_ellipsis(datum.tail):
            raise SchemeSyntaxError("'...' is not supported in dotted patterns", text=str(datum))
        return PatternPair(
            tuple(_compile_pattern(d, literals, depths, depth) for d in datum.items),
            _compile_pattern(datum.tail, literals, depths, depth),
        )

    raise SchemeSyntaxError(f"invalid pattern {datum}", text=str(datum))


# --- Templates ---

def _compile_elements(items: tuple[Datum, ...]) -> tuple[TemplateElement, ...]:
    elements: list[TemplateElement] = []
    for item in items:
        if _is_ellipsis(item):
            if not elements:
                raise SchemeSyntaxError("'...' must follow a template element", text=str(item))
            elements[-1] = TemplateEllipsis(elements[-1])
        else:
            elements.append(_compile_template(item))
    return tuple(elements)


def _compile_template(datum: Datum) -> Template:
    if type(datum) in ABBREVIATIONS:
        datum = expand_abbreviation(datum)

    if isinstance(datum, Identifier):
        if _is_ellipsis(datum):
            raise SchemeSyntaxError("'...' must follow a template element", text=datum.name)
        return TemplateIdentifier(datum.name)
    if isinstance(datum, ATOMS):
        return TemplateDatum(datum)
    if isinstance(datum, List):
        return TemplateList(_compile_elements(datum.items))
    if isinstance(datum, Vector):
        return TemplateVector(_compile_elements(datum.items))
    if isinstance(datum, DottedPair):
        if _is_ellipsis(datum.tail):
            raise SchemeSyntaxError("'...' cannot be the tail of a dotted template", text=str(datum))
        return TemplatePair(_compile_elements(datum.items), _compile_template(datum.tail))
    raise SchemeSyntaxError(f"invalid template {datum}", text=str(datum))


def _check_template_depths(element: TemplateElement, depths: dict[str, int], depth: int) -> None:
    """Every pattern variable needs at least as many ellipses in the template as in the pattern."""
    if isinstance(element, TemplateEllipsis):
        _check_template_depths(element.template, depths, depth + 1)
    elif isinstance(element, TemplateIdentifier):
        required = depths.get(element.name)
        if required is not None and depth < required:
            raise SchemeSyntaxError(
                f"pattern variable '{element.name}' needs {required} ellipses in the template",
                text=element.name,
            )
    elif isinstance(element, (TemplateList, TemplateVector)):
        for child in element.elements:
            _check_template_depths(child, depths, depth)
    elif isinstance(element, TemplatePair):
        for child in element.elements:
            _check_template_depths(child, depths, depth)
        _check_template_depths(element.tail, depths, depth)
