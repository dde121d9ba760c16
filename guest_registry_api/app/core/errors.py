"""Custom exception classes."""

from typing import Any, Dict, List, Optional


class RegistrationValidationError(Exception):
    """Raised when a submitted guest fails any validation stage.

    ``errors`` holds one dictionary per violation, ready to be returned
    to the client.
    """

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.message = message
        self.errors = errors


class RegistrationFailedError(Exception):
    """Raised when a validated guest could not be persisted."""

    def __init__(self, message: str = "Failed to save guest registration", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StoreError(Exception):
    """Base class for record store failures."""
    pass


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached or queried."""
    pass


class DuplicateRecordError(StoreError):
    """Raised when an insert violates the unique ``idNumber`` constraint."""
    pass
