"""
Tests for the exception taxonomy and its HTTP mapping.

WHY: Clients branch on status codes, so each failure kind must keep its
code, and the JSON body must never echo secrets passed as context.
"""

import pytest

from derra.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BusinessRuleViolation,
    DatabaseError,
    PaymentProviderError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    TokenExpiredError,
    ValidationError,
)


@pytest.mark.parametrize(
    "exc_class, status_code",
    [
        (AuthenticationError, 401),
        (TokenExpiredError, 401),
        (AuthorizationError, 403),
        (ValidationError, 400),
        (ResourceAlreadyExistsError, 400),
        (BusinessRuleViolation, 400),
        (ResourceNotFoundError, 404),
        (PaymentProviderError, 502),
        (DatabaseError, 500),
    ],
)
def test_status_codes(exc_class, status_code):
    assert exc_class().status_code == status_code


def test_default_message():
    assert str(AuthenticationError()) == "Authentication required"


def test_to_dict_shape():
    exc = ResourceNotFoundError("Business not found", business_id=12)

    assert exc.to_dict() == {
        "error": "ResourceNotFoundError",
        "message": "Business not found",
        "status_code": 404,
        "details": {"business_id": 12},
    }


def test_to_dict_filters_sensitive_context():
    exc = AuthenticationError(
        "Invalid credentials", password="hunter2", token="abc", username="bob"
    )

    details = exc.to_dict()["details"]

    assert details == {"username": "bob"}


def test_empty_context_serializes_as_none():
    assert ValidationError("Search query is required").to_dict()["details"] is None


def test_status_code_override():
    exc = AppException("Teapot", status_code=418)

    assert exc.status_code == 418
    # The class default is untouched
    assert AppException().status_code == 500
