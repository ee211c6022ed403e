# zscheme: reader and macro-expanding front end for an R5RS Scheme subset.
#
# Pipeline:
# - reader:   text lines -> positioned tokens -> Datum trees
# - analysis: Datum -> Expression, resolving scopes and expanding syntax-rules macros
#
# The entry points most callers need are re-exported from zscheme.compiler.

__version__ = "0.1.0"
