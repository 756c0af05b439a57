"""
Custom exception classes for better error handling.
Provides specific error types instead of generic exceptions.
"""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class RevisionItemNotFoundError(DatabaseError):
    """Raised when a revision item is not found."""

    pass


class StudySessionNotFoundError(DatabaseError):
    """Raised when a study session is not found."""

    pass


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass
