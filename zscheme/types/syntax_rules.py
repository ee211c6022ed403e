"""Compiled syntax-rules transformers: patterns, templates and rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from zscheme.types.datum import Datum

ELLIPSIS = "..."
WILDCARD = "_"


# --- Patterns ---

@dataclass(frozen=True)
class PatternIdentifier:
    """A pattern variable, or a literal when listed in the transformer's literals."""

    name: str


@dataclass(frozen=True)
class PatternList:
    items: tuple[Pattern, ...]


@dataclass(frozen=True)
class PatternPair:
    items: tuple[Pattern, ...]
    tail: Pattern


@dataclass(frozen=True)
class PatternVector:
    items: tuple[Pattern, ...]


@dataclass(frozen=True)
class PatternEllipsis:
    """prefix, then `repeated ...` zero or more times, then suffix.

    vector distinguishes #(p ... q) from (p ... q).
    """

    prefix: tuple[Pattern, ...]
    repeated: Pattern
    suffix: tuple[Pattern, ...]
    vector: bool = False


@dataclass(frozen=True)
class PatternDatum:
    """A self-evaluating literal matched by equality.

    Also holds the keyword of a quote abbreviation in a pattern, which matches
    an identifier of the same base name.
    """

    datum: Datum


Pattern = Union[PatternIdentifier, PatternList, PatternPair, PatternVector, PatternEllipsis, PatternDatum]


# --- Templates ---

@dataclass(frozen=True)
class TemplateIdentifier:
    name: str


@dataclass(frozen=True)
class TemplateList:
    elements: tuple[TemplateElement, ...]


@dataclass(frozen=True)
class TemplatePair:
    elements: tuple[TemplateElement, ...]
    tail: Template


@dataclass(frozen=True)
class TemplateVector:
    elements: tuple[TemplateElement, ...]


@dataclass(frozen=True)
class TemplateDatum:
    datum: Datum


@dataclass(frozen=True)
class TemplateEllipsis:
    """A template element emitted once per element of its ellipsis bindings."""

    template: TemplateElement


Template = Union[TemplateIdentifier, TemplateList, TemplatePair, TemplateVector, TemplateDatum]
TemplateElement = Union[Template, TemplateEllipsis]


@dataclass(frozen=True)
class SyntaxRule:
    pattern: Pattern
    template: Template


@dataclass(frozen=True)
class SyntaxRules:
    """A syntax-rules transformer.

    scope is the index of the scope the transformer was defined in; free
    identifiers of its templates are resolved there.
    """

    literals: frozenset[str]
    rules: tuple[SyntaxRule, ...]
    scope: int = 0
