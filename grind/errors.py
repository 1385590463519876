"""
Exceptions raised at the operation boundary.

Calculations never raise these; they are for registry, state machine,
milestone and storage calls.
"""

from __future__ import annotations


class GrindError(Exception):
    """Base class for all tracker errors."""


class ValidationError(GrindError):
    """Input rejected before anything was written."""


class NotFoundError(GrindError):
    """The targeted habit, log or milestone no longer exists."""

    def __init__(self, kind: str, ident) -> None:
        super().__init__(f"{kind} {ident!r} not found")
        self.kind = kind
        self.ident = ident


class PersistenceError(GrindError):
    """The SQLite store failed. The original error is kept as __cause__."""
