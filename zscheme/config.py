from __future__ import annotations
import os
from dataclasses import dataclass


UNBOUND_POLICIES = ("defer", "error")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Defaults
_DEFAULT_MAX_DEPTH = 200
_DEFAULT_MAX_EXPANSIONS = 1000
_DEFAULT_UNBOUND_POLICY = "defer"
_DEFAULT_LOG_LEVEL = "WARNING"


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    value = int(raw.strip())
    if value <= 0:
        raise ValueError(f"{var} must be a positive integer, got {raw!r}")
    return value


def choice_from_env(var: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    value = raw.strip()
    if value not in choices:
        raise ValueError(f"{var} must be one of {', '.join(choices)}, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Tunables for the reader and the AST builder.

    max_depth bounds datum nesting so deeply nested input fails with a syntax
    error instead of exhausting the interpreter stack. max_expansions bounds
    how many times one form is re-expanded in a row before it stops being a
    macro use; macro uses nested in the result have their own count.
    unbound_policy is "defer" (free names are left for the evaluator) or
    "error" (free names are rejected while building the AST). Under "error"
    top-level forms are checked one at a time, so a top-level reference must
    follow the define that binds it, while the definitions of a body are all
    bound before any of them is built.
    """

    max_depth: int = _DEFAULT_MAX_DEPTH
    max_expansions: int = _DEFAULT_MAX_EXPANSIONS
    unbound_policy: str = _DEFAULT_UNBOUND_POLICY
    log_level: str = _DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if self.unbound_policy not in UNBOUND_POLICIES:
            raise ValueError(f"unknown unbound policy {self.unbound_policy!r}")
        if self.max_depth <= 0 or self.max_expansions <= 0:
            raise ValueError("max_depth and max_expansions must be positive")

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            max_depth=int_from_env("ZSCHEME_MAX_DEPTH", _DEFAULT_MAX_DEPTH),
            max_expansions=int_from_env("ZSCHEME_MAX_EXPANSIONS", _DEFAULT_MAX_EXPANSIONS),
            unbound_policy=choice_from_env(
                "ZSCHEME_UNBOUND_POLICY", _DEFAULT_UNBOUND_POLICY, UNBOUND_POLICIES
            ),
            log_level=choice_from_env("ZSCHEME_LOG_LEVEL", _DEFAULT_LOG_LEVEL, LOG_LEVELS),
        )
