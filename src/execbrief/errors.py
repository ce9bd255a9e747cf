"""
ExecBrief error taxonomy.

Only configuration problems are fatal. Provider failures are degraded to
explicit "missing" values by the components that call them, so most of these
exist to name a condition rather than to be raised across module boundaries.
"""

from __future__ import annotations


class ExecBriefError(Exception):
    """Base class for ExecBrief errors."""


class ConfigInvalid(ExecBriefError):
    """Configuration is missing, unreadable, or lacks required fields.

    Raised before any network call is attempted.
    """

    def __init__(self, message: str, *, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class AuthUnavailable(ExecBriefError):
    """The BI provider session could not be established."""
