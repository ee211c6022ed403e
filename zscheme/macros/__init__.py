"""syntax-rules: compilation, matching and hygienic expansion."""

from zscheme.macros.expander import Expansion, expand
from zscheme.macros.hygiene import FreshNames
from zscheme.macros.matcher import Repeated, match_pattern
from zscheme.macros.rules import compile_syntax_rules

__all__ = [
    "Expansion",
    "FreshNames",
    "Repeated",
    "compile_syntax_rules",
    "expand",
    "match_pattern",
]
