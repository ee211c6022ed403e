"""Lexer, positional reader and datum parser."""
