from zscheme.analysis.builder import AstBuilder

__all__ = ["AstBuilder"]
