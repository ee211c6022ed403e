"""Fresh names for identifiers introduced by macro templates.

An identifier written literally in a template is renamed to `<name>#<n>` for
each expansion. `#` can never appear in an identifier read from source, so an
alias cannot collide with a user name, and its original spelling is the text
before the first `#`.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import count

from zscheme.types.datum import (
    ABBREVIATIONS,
    DottedPair,
    Identifier,
    List,
    Datum,
    Vector,
)

ALIAS_MARK = "#"


@dataclass(frozen=True)
class Alias:
    """An alias introduced by an expansion and the scope its macro was defined in."""

    original: str
    scope: int


class FreshNames:
    """Counter handed to each expansion by its caller.

    Sharing one instance across expansions keeps every alias unique.
    """

    def __init__(self, start: int = 1):
        self._counter = count(start)

    def fresh(self, name: str) -> str:
        return f"{base_name(name)}{ALIAS_MARK}{next(self._counter)}"


def base_name(name: str) -> str:
    """The source spelling of a possibly renamed identifier."""
    return name.partition(ALIAS_MARK)[0]


def is_alias(name: str) -> bool:
    return ALIAS_MARK in name


def strip_aliases(datum: Datum) -> Datum:
    """Restore the source spelling of every identifier inside `datum`."""
    if isinstance(datum, Identifier):
        return Identifier(base_name(datum.name)) if is_alias(datum.name) else datum
    if isinstance(datum, List):
        return List(tuple(strip_aliases(d) for d in datum.items))
    if isinstance(datum, Vector):
        return Vector(tuple(strip_aliases(d) for d in datum.items))
    if isinstance(datum, DottedPair):
        return DottedPair(tuple(strip_aliases(d) for d in datum.items), strip_aliases(datum.tail))
    if type(datum) in ABBREVIATIONS:
        return type(datum)(strip_aliases(datum.datum))
    return datum
