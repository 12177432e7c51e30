"""Error taxonomy for the ordering service.

Errors are raised where they are detected and propagate unchanged to the API
boundary, where a single exception handler turns them into JSON responses.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable reason returned to the caller
        """
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Bad or missing input, unsupported payment method, empty cart or zone rejection."""

    status_code = 400


class NotFoundError(ServiceError):
    """Unknown zone, order or item identifier."""

    status_code = 404


class ConflictError(ServiceError):
    """Duplicate value for a unique field (admin paths only)."""

    status_code = 409


class ServiceUnavailableError(ServiceError):
    """External geocoding provider failed. Never retried automatically."""

    status_code = 503


class InternalError(ServiceError):
    """Persistence or transaction failure. Nothing was partially committed."""

    status_code = 500
