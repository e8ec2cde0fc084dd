"""
Persistence errors and user-facing error text.
"""

from datetime import datetime

from supabase import (
    AuthError as SupabaseAuthError,
    PostgrestAPIError,
    StorageException,
)


class AuthError(Exception):
    """Authentication failure (sign up, sign in, session...)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.timestamp = datetime.now()

    def __str__(self) -> str:
        return f"AuthError: {self.message}"


class RepositoryError(Exception):
    """Database or storage write failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.timestamp = datetime.now()


def _message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)


def describe_error(exc: Exception) -> str:
    """Turn an auth / database / storage exception into display text."""
    if isinstance(exc, (AuthError, SupabaseAuthError)):
        return f"Authentication error: {_message(exc)}"
    if isinstance(exc, PostgrestAPIError):
        return f"Database error: {_message(exc)}"
    if isinstance(exc, StorageException):
        return f"Storage error: {_message(exc)}"
    return f"Unexpected error: {exc}"
