"""
Exception types raised before the browser session starts.

Once the views are up nothing in the core raises: lookups that miss and
comparisons without changes simply produce empty results.
"""

from __future__ import annotations


class GitCuiError(Exception):
    """Base class for all gitcui specific errors."""


class RepositoryAccessError(GitCuiError):
    """Raised when a repository cannot be opened or cloned."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"cannot access repository {source}: {reason}")
        self.source = source
        self.reason = reason


class EmptyHistoryError(GitCuiError):
    """Raised when no commit can be read from the repository."""

    def __init__(self, source: str) -> None:
        super().__init__(f"no commits found in {source}")
        self.source = source
