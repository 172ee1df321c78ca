"""Custom service layer errors."""

from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    """Base error for service-layer failures."""


class ValidationError(ServiceError):
    """Raised when input shape or a business rule validation fails."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(ValidationError):
    """Raised when a state machine rejects a named transition."""


class NotFoundError(ServiceError):
    """Raised when an entity is not found."""


class PermissionDeniedError(ServiceError):
    """Raised when the actor's role does not grant the requested feature."""
