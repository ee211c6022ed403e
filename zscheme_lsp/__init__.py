"""zscheme Language Server package.

This package provides:
- A pygls-based Language Server publishing reader and syntax diagnostics.
- The diagnostics collector it uses, which can also be called on its own.

Note: The server never evaluates user buffers; it only reads and builds them.
"""

__all__ = [
    "diagnostics",
    "server",
]
