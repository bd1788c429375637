"""
Restocking error taxonomy.

Every failure in this package is recoverable by user retry:
- ValidationError: local, raised before any network call
- TransportError: the inventory service could not be reached or answered garbage
- RemoteRejection: the inventory service answered with a non-success status

The workflow layer catches all of these and turns them into plain
success/failure results for the UI.
"""
from typing import Any, Optional


class RestockError(Exception):
    """Base exception for the restocking workflow."""

    default_message = "Restocking error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict:
        error_dict = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            error_dict["code"] = self.code
        if self.details:
            error_dict["details"] = self.details
        return error_dict


class ValidationError(RestockError):
    """Form input rejected locally. Never reaches the inventory service."""

    default_message = "Validation error"


class TransportError(RestockError):
    """Network failure or unreadable response from the inventory service."""

    default_message = "Inventory service unavailable"


class RemoteRejection(RestockError):
    """
    Inventory service answered with a non-success status.

    `message` is the service's own text and is shown to the user as-is.
    """

    default_message = "Request rejected by inventory service"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        self.status_code = status_code
        # None when the service gave no message of its own
        self.remote_message = message
        super().__init__(message, code, details)

    def to_dict(self) -> dict:
        error_dict = super().to_dict()
        if self.status_code is not None:
            error_dict["status_code"] = self.status_code
        return error_dict


class NotFoundError(RemoteRejection):
    """The requested restock order or medication does not exist remotely."""

    default_message = "Resource not found"
