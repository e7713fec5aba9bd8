"""
Custom exceptions for the application.
"""

from fastapi import HTTPException, status


class StudyAppException(Exception):
    """Base exception for the flashcard study application."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


# ═══════════════════════════════════════════════════════════════════════════
# AUTHENTICATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class AuthenticationError(StudyAppException):
    """Raised when authentication fails."""
    pass


class InvalidTokenError(StudyAppException):
    """Raised when a JWT token is invalid or expired."""
    pass


class UserAlreadyExistsError(StudyAppException):
    """Raised when trying to register with an existing email."""
    pass


class UserNotFoundError(StudyAppException):
    """Raised when user is not found."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# FLASHCARD SET EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class FlashcardSetNotFoundError(StudyAppException):
    """Raised when a set is absent or not owned by the caller."""
    pass


class EmptySetError(StudyAppException):
    """Raised when a set has no cards and cannot be studied."""
    pass


class WizardValidationError(StudyAppException):
    """Raised when a set creation step is given an invalid value or cannot proceed."""
    pass


class PersistenceError(StudyAppException):
    """Raised when a Card Store read or write fails."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# STUDY SESSION EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class StudySessionNotFoundError(StudyAppException):
    """Raised when a live study session is not found for the caller."""
    pass


class SessionStateError(StudyAppException):
    """Raised when an operation is not allowed in the session's current phase."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# CARD GENERATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════


class CardGenerationError(StudyAppException):
    """Base class for card generator failures."""
    pass


class GeneratorConfigError(CardGenerationError):
    """Raised when no API credential is configured for the generator."""
    pass


class UpstreamError(CardGenerationError):
    """Raised when the completion API call fails at transport or HTTP level."""
    pass


class FormatError(CardGenerationError):
    """Raised when the completion text cannot be read as a list of cards."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# HTTP EXCEPTION HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
