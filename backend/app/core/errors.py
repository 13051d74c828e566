from __future__ import annotations

from fastapi import status


class ServiceError(Exception):
    """Base class for failures raised by the service layer.

    Every subclass carries a short machine-readable ``kind`` and the HTTP status the API layer
    answers with. ``message`` is safe to show to the caller.
    """

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, *, details: dict | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(ServiceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class UnauthorizedError(ServiceError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ConflictError(ServiceError):
    kind = "conflict"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflict"


class ExpiredError(ServiceError):
    kind = "expired"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Expired"


class AlreadyUsedError(ServiceError):
    kind = "already_used"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already used"


class InvalidInputError(ServiceError):
    kind = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NoRecipientsConfiguredError(ServiceError):
    kind = "no_recipients_configured"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "No emergency contacts configured"


class DeliveryFailedError(ServiceError):
    kind = "delivery_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to deliver notification"


class UpstreamError(ServiceError):
    kind = "upstream_error"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "External service unavailable"
