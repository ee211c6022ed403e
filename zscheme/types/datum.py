"""Datum: the untyped syntax tree produced by the reader.

Data are frozen values. Sequences are tuples in source order, so a datum can
be hashed, compared structurally and shared between trees.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from zscheme.reader.tokens import LispNum


@dataclass(frozen=True)
class Boolean:
    value: bool

    def __str__(self):
        return "#t" if self.value else "#f"


@dataclass(frozen=True)
class Number:
    value: LispNum

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Character:
    value: str

    def __str__(self):
        names = {" ": "space", "\n": "newline"}
        return "#\\" + names.get(self.value, self.value)


@dataclass(frozen=True)
class String:
    value: str

    def __str__(self):
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'


@dataclass(frozen=True)
class Identifier:
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class List:
    items: tuple[Datum, ...] = ()

    def __str__(self):
        return "(" + " ".join(str(d) for d in self.items) + ")"


@dataclass(frozen=True)
class DottedPair:
    """A list whose final cdr is a single non-list datum: (a b . c)."""

    items: tuple[Datum, ...]
    tail: Datum

    def __str__(self):
        return "(" + " ".join(str(d) for d in self.items) + f" . {self.tail})"


@dataclass(frozen=True)
class Quote:
    datum: Datum

    def __str__(self):
        return f"'{self.datum}"


@dataclass(frozen=True)
class Backquote:
    datum: Datum

    def __str__(self):
        return f"`{self.datum}"


@dataclass(frozen=True)
class Unquote:
    datum: Datum

    def __str__(self):
        return f",{self.datum}"


@dataclass(frozen=True)
class UnquoteSplice:
    datum: Datum

    def __str__(self):
        return f",@{self.datum}"


@dataclass(frozen=True)
class Vector:
    items: tuple[Datum, ...] = ()

    def __str__(self):
        return "#(" + " ".join(str(d) for d in self.items) + ")"


Datum = Union[
    Boolean,
    Number,
    Character,
    String,
    Identifier,
    List,
    DottedPair,
    Quote,
    Backquote,
    Unquote,
    UnquoteSplice,
    Vector,
]

ATOMS = (Boolean, Number, Character, String)

# Abbreviation datum type -> the identifier its long form starts with
ABBREVIATIONS: dict[type, str] = {
    Quote: "quote",
    Backquote: "quasiquote",
    Unquote: "unquote",
    UnquoteSplice: "unquote-splicing",
}


def make_list(items: tuple[Datum, ...] | list[Datum], tail: Datum | None = None) -> Datum:
    """Build a list or dotted pair, keeping DottedPair tails non-list.

    (a . (b c)) is the list (a b c); (a . (b . c)) is the pair (a b . c).
    """
    items = tuple(items)
    if tail is None:
        return List(items)
    if isinstance(tail, List):
        return List(items + tail.items)
    if isinstance(tail, DottedPair):
        return DottedPair(items + tail.items, tail.tail)
    if not items:
        return tail
    return DottedPair(items, tail)


def expand_abbreviation(datum: Datum) -> Datum:
    """The long form of a quote abbreviation: 'x is (quote x)."""
    keyword = ABBREVIATIONS.get(type(datum))
    if keyword is None:
        return datum
    return List((Identifier(keyword), datum.datum))
