"""Custom exceptions for the Prefscale backend"""

from typing import Optional


class PrefscaleError(Exception):
    """Base exception for Prefscale. Carries the HTTP status and client message."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidInput(PrefscaleError):
    """Request is missing required fields or carries invalid values"""
    status_code = 400
    default_message = "Required fields missing"


class MissingCredentials(InvalidInput):
    """Login attempted without email or password"""
    default_message = "Missing credentials"


class DuplicateEmail(PrefscaleError):
    """An account with this email already exists"""
    status_code = 400
    default_message = "Email already exists"


class InvalidCredentials(PrefscaleError):
    """Unknown email or wrong password (deliberately indistinguishable)"""
    status_code = 400
    default_message = "Invalid credentials"


class Unauthenticated(PrefscaleError):
    """Missing, malformed, expired or wrongly signed token"""
    status_code = 401
    default_message = "Invalid token"


class Forbidden(PrefscaleError):
    """Valid token without the required role"""
    status_code = 403
    default_message = "Admin only"


class NotFound(PrefscaleError):
    """Requested document does not exist"""
    status_code = 404
    default_message = "Not found"


class ServiceUnavailable(PrefscaleError):
    """Unexpected failure while serving the request"""
    status_code = 503
    default_message = "Server busy, retry later"


class StorageUnavailable(ServiceUnavailable):
    """Document or blob store failure"""
    status_code = 500
    default_message = "Storage unavailable"


class DocumentConflict(Exception):
    """Unique-key violation raised by a document store"""

    def __init__(self, collection: str, field: str, value: str):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate {field} in {collection}")


class ConfigError(PrefscaleError):
    """Configuration error"""
    pass
