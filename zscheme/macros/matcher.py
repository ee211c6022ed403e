"""Structural matching of syntax-rules patterns against macro arguments.

Bindings map a pattern variable to the datum it matched, or, under an
ellipsis, to a Repeated tuple holding one entry per repetition (nested
Repeated tuples for nested ellipses).
"""

from __future__ import annotations

from typing import Optional, Union

from zscheme.macros.hygiene import base_name
from zscheme.types.datum import (
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
    WILDCARD,
    Pattern,
    PatternDatum,
    PatternEllipsis,
    PatternIdentifier,
    PatternList,
    PatternPair,
    PatternVector,
)


class Repeated(tuple):
    """The matches of one pattern variable under an ellipsis."""

    def __repr__(self):
        return f"Repeated({tuple.__repr__(self)})"


Bound = Union[Datum, Repeated]


def pattern_variables(pattern: Pattern, literals: frozenset[str]) -> list[str]:
    """Names bound by `pattern`, in pattern order."""
    if isinstance(pattern, PatternIdentifier):
        if pattern.name in literals or pattern.name == WILDCARD:
            return []
        return [pattern.name]
    if isinstance(pattern, (PatternList, PatternVector)):
        return [name for item in pattern.items for name in pattern_variables(item, literals)]
    if isinstance(pattern, PatternPair):
        names = [name for item in pattern.items for name in pattern_variables(item, literals)]
        return names + pattern_variables(pattern.tail, literals)
    if isinstance(pattern, PatternEllipsis):
        names = [name for item in pattern.prefix for name in pattern_variables(item, literals)]
        names += pattern_variables(pattern.repeated, literals)
        return names + [name for item in pattern.suffix for name in pattern_variables(item, literals)]
    return []


def match_pattern(pattern: Pattern, datum: Datum, literals: frozenset[str]) -> Optional[dict[str, Bound]]:
    """Bindings for `datum` against `pattern`, or None when it does not match."""
    bindings: dict[str, Bound] = {}
    if _match(pattern, datum, literals, bindings):
        return bindings
    return None


def _match_all(patterns, data, literals, bindings) -> bool:
    return all(_match(p, d, literals, bindings) for p, d in zip(patterns, data))


def _match(pattern: Pattern, datum: Datum, literals: frozenset[str], bindings: dict[str, Bound]) -> bool:
    if isinstance(pattern, PatternIdentifier):
        if pattern.name == WILDCARD and WILDCARD not in literals:
            return True
        if pattern.name in literals:
            return isinstance(datum, Identifier) and base_name(datum.name) == base_name(pattern.name)
        bindings[pattern.name] = datum
        return True

    if isinstance(pattern, PatternDatum):
        if isinstance(pattern.datum, Identifier):
            return isinstance(datum, Identifier) and base_name(datum.name) == pattern.datum.name
        return datum == pattern.datum

    if type(datum) in ABBREVIATIONS:
        datum = expand_abbreviation(datum)

    if isinstance(pattern, PatternList):
        return (
            isinstance(datum, List)
            and len(datum.items) == len(pattern.items)
            and _match_all(pattern.items, datum.items, literals, bindings)
        )

    if isinstance(pattern, PatternVector):
        return (
            isinstance(datum, Vector)
            and len(datum.items) == len(pattern.items)
            and _match_all(pattern.items, datum.items, literals, bindings)
        )

    if isinstance(pattern, PatternPair):
        if not isinstance(datum, (List, DottedPair)):
            return False
        fixed = len(pattern.items)
        if len(datum.items) < fixed:
            return False
        if not _match_all(pattern.items, datum.items, literals, bindings):
            return False
        if isinstance(datum, List):
            rest = List(datum.items[fixed:])
        else:
            rest = make_list(datum.items[fixed:], datum.tail)
        return _match(pattern.tail, rest, literals, bindings)

    if isinstance(pattern, PatternEllipsis):
        if not isinstance(datum, Vector if pattern.vector else List):
            return False
        items = datum.items
        prefix, suffix = len(pattern.prefix), len(pattern.suffix)
        repeats = len(items) - prefix - suffix
        if repeats < 0:
            return False
        if not _match_all(pattern.prefix, items[:prefix], literals, bindings):
            return False
        matches: list[dict[str, Bound]] = []
        for item in items[prefix:prefix + repeats]:
            sub: dict[str, Bound] = {}
            if not _match(pattern.repeated, item, literals, sub):
                return False
            matches.append(sub)
        for name in pattern_variables(pattern.repeated, literals):
            bindings[name] = Repeated(m[name] for m in matches)
        return _match_all(pattern.suffix, items[prefix + repeats:], literals, bindings)

    return False
