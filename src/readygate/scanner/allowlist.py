"""Allowed exceptions: per-rule path globs that suppress one rule only."""

from __future__ import annotations

from readygate.policy.models import Policy
from readygate.scanner.paths import GlobSet


class ExceptionResolver:
    """Answers whether a file is exempt from one pattern.

    Globs are compiled once at construction; afterwards the resolver holds no
    mutable state and can be shared between matcher threads.
    """

    def __init__(self, policy: Policy) -> None:
        self._globs: dict[str, GlobSet] = {
            pattern_id: GlobSet(globs)
            for pattern_id, globs in policy.allowed_exceptions.items()
        }

    def is_excepted(self, pattern_id: str, file: str) -> bool:
        globs = self._globs.get(pattern_id)
        if globs is None:
            return False
        return globs.matches(file)

    __call__ = is_excepted


def is_excepted(policy: Policy, pattern_id: str, file: str) -> bool:
    """One-off check; build an ExceptionResolver when checking many files."""
    return ExceptionResolver(policy).is_excepted(pattern_id, file)
