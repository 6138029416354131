from rest_framework import status


class CheckoutError(Exception):
    """Base class for failures raised by the checkout flow."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "checkout_error"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def as_payload(self) -> dict:
        payload = {"detail": self.message, "code": self.code}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(CheckoutError):
    """Bad or missing input such as a malformed experience id."""

    code = "validation_error"


class PersistenceError(CheckoutError):
    """The booking or payment store rejected a write."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "persistence_error"


class ExternalServiceError(CheckoutError):
    """A wallet, onramp or Commerce call failed or timed out."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "external_service_error"


class ConflictError(CheckoutError):
    """The requested transition is not allowed from the current state."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class NotFoundError(ValidationError):
    """The booking or experience being acted on does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
