# farmdesk/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class FarmApiError(Exception):
    """Base error for anything that goes wrong talking to the marketplace API."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class ApiNetworkError(FarmApiError):
    """Timeout or connection failure; no HTTP response was received."""


class SessionExpiredError(FarmApiError):
    """401 that could not be recovered by refreshing the token."""


class ApiForbiddenError(FarmApiError):
    pass


class ApiNotFoundError(FarmApiError):
    pass


class ApiValidationError(FarmApiError):
    pass


class FormValidationError(Exception):
    """Client-side form validation failed. Nothing was sent."""

    def __init__(self, errors: Dict[str, str], message: str = "Please fill in all required fields correctly"):
        super().__init__(message)
        self.message = message
        self.errors = dict(errors)


class PurchaseSubmissionError(FarmApiError):
    """
    The purchase and the status update run side by side. Either one failing
    fails the submission, but the other may already have gone through.
    """

    def __init__(self, message: str, purchase_ok: bool, status_ok: bool, cause: Optional[Exception] = None):
        status_code = getattr(cause, "status_code", None)
        super().__init__(message, status_code=status_code)
        self.purchase_ok = purchase_ok
        self.status_ok = status_ok
        self.cause = cause

    @property
    def partial(self) -> bool:
        return self.purchase_ok != self.status_ok


class DuplicateSubmissionError(Exception):
    pass


def error_for_status(status_code: int, message: str, payload: Optional[Dict[str, Any]] = None) -> FarmApiError:
    """Map an HTTP error status to the matching exception type."""
    if status_code == 401:
        return SessionExpiredError(message, status_code, payload)
    if status_code == 403:
        return ApiForbiddenError(message, status_code, payload)
    if status_code == 404:
        return ApiNotFoundError(message, status_code, payload)
    if status_code in (400, 422):
        return ApiValidationError(message, status_code, payload)
    return FarmApiError(message, status_code, payload)
