"""
Error taxonomy for edit sessions.

Every error is recoverable: it is recorded as the session's last error and
reported to the caller, and the session stays usable afterwards.
"""

from typing import Optional


class PixshopError(Exception):
    """Base class for all session errors."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def to_dict(self):
        """Serialize for API responses."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
        }


class ValidationError(PixshopError):
    """A precondition of the requested action does not hold."""


class OperationBusyError(PixshopError):
    """Another operation is already in flight."""


class GeometryError(PixshopError):
    """Coordinate mapping or crop geometry cannot be resolved."""


class CollaboratorError(PixshopError):
    """The generative service failed or returned an unusable result."""

    def __init__(self, operation: Optional[str], reason: str):
        message = f"{operation} failed: {reason}" if operation else reason
        super().__init__(message, operation)
        self.reason = reason
