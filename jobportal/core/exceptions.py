"""Custom exception classes for the application"""

from enum import Enum
from typing import Any, Optional


class TokenFailure(str, Enum):
    """Why a token was rejected. Logged server-side, never sent to clients."""
    EXPIRED = "expired"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


# Input Errors
class ValidationError(BaseAPIException):
    """Malformed or missing input"""
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, status_code=400, details=details)


class InvalidInputError(ValidationError):
    """Input rejected before any work was done (e.g. empty password)"""


# Authentication Errors
class UnauthorizedError(BaseAPIException):
    """Bad, expired or missing credentials or token"""
    def __init__(
        self,
        message: str = "Authentication failed",
        reason: Optional[TokenFailure] = None
    ):
        super().__init__(message, status_code=401)
        self.reason = reason


# Authorization Errors
class ForbiddenError(BaseAPIException):
    """Authenticated but insufficiently privileged"""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


# Resource Errors
class NotFoundError(BaseAPIException):
    """Referenced entity is absent"""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ConflictError(BaseAPIException):
    """Duplicate unique key"""
    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, status_code=409)
