"""
ExecBrief authentication and session management.

Provides the Tableau sign-in session with 401-driven and cadence-driven
re-authentication.
"""

from execbrief.auth.session import SessionState, SessionToken, TableauSession

__all__ = [
    "SessionState",
    "SessionToken",
    "TableauSession",
]
