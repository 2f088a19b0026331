"""
Error taxonomy for the scheduling and billing engine.

Client-facing errors subclass HTTPException so services can raise them
directly and routers surface them unchanged. SideEffectError is raised by
messaging senders after commit and is only ever logged.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Bad or missing input, rejected before any write."""

    def __init__(self, detail: Any = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    """A referenced entity does not exist."""

    def __init__(self, detail: Any = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(HTTPException):
    """Authorization failure or illegal state transition."""

    def __init__(self, detail: Any = "Action not allowed"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class PayerResolutionError(HTTPException):
    """No billable party (company or patient) could be identified."""

    def __init__(self, detail: Any = "Could not identify a payer for the invoice"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    """The target row is locked by another transaction."""

    def __init__(self, detail: Any = "Resource is being modified by another request, please retry"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class PersistenceError(HTTPException):
    """A write or commit failed; the whole use case was rolled back."""

    def __init__(self, detail: Any = "Database operation failed"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class SideEffectError(Exception):
    """A post-commit notification, email or message could not be delivered."""

    def __init__(self, channel: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"[{channel}] {message}")
        self.channel = channel
        self.cause = cause
