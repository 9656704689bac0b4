"""
Error taxonomy of the directory API.

WHY: Route handlers and services signal failures by raising these
exceptions; the handlers in exception_handlers.py map them onto HTTP
responses with a uniform body:

    {"error": ..., "message": ..., "status_code": ..., "details": ...}

Storage backends never raise these for expected absence. They return
None/False and the services translate that into the taxonomy below.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Root of every error a service may raise on purpose.

    Subclasses only pick a status code and a default message.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Args:
            message: Client-facing text; falls back to default_message
            status_code: Per-instance override of the class status
            **context: Ids and values echoed under "details" (secrets removed)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Response body: error class name, message, status and filtered details."""
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when no actor is bound to the request or credentials are invalid.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppException):
    """
    Raised when the authenticated actor lacks rights over the target entity.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "Forbidden"


class TokenExpiredError(AuthenticationError):
    """Raised when a JWT token has expired."""

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Raised when a JWT token is malformed or has an invalid signature."""

    default_message = "Token is invalid"


# ============================================================================
# Validation & Resource Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised for malformed input or a reference to a missing category.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


class ResourceNotFoundError(AppException):
    """
    Raised when a referenced entity id does not exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class ResourceAlreadyExistsError(AppException):
    """
    Raised on conflicting state: duplicate like, username or email taken.

    WHY: The public API reports conflicts as 400 with a descriptive
    message rather than 409, so clients only need to handle one
    "bad request" code for user-correctable errors.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Resource already exists"


class BusinessRuleViolation(AppException):
    """
    Raised when a request is well-formed but not allowed in the current state
    (e.g. paying for a listing that already has an active subscription).

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Business rule violation"


# ============================================================================
# External Service Exceptions
# ============================================================================


class ExternalServiceError(AppException):
    """
    A third-party API (the payment provider) failed or rejected the call.

    HTTP Status: 502 Bad Gateway
    """

    status_code = 502
    default_message = "External service error"


class PaymentProviderError(ExternalServiceError):
    """Raised when the payment provider API call fails."""

    default_message = "Payment processing error"


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(AppException):
    """
    Raised when the persistence medium fails.

    The message is always generic; the underlying error is logged, never
    returned to the client.

    HTTP Status: 500 Internal Server Error
    """

    status_code = 500
    default_message = "Database error"
