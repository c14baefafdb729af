"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class FirstMateError(Exception):
    """Base exception for firstmate."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(FirstMateError):
    """Validation error."""

    pass
