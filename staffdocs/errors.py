# staffdocs/errors.py
"""
StaffDocs SDK Errors

Exception taxonomy surfaced to callers. The request pipeline is the only
place that turns HTTP statuses into these exceptions; facades let them
propagate unchanged.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


DEFAULT_ERROR_MESSAGE = "A server error occurred"
NETWORK_ERROR_MESSAGE = "Could not connect to the server"


class StaffDocsError(Exception):
    """Base error for every failure the SDK reports."""

    default_message = DEFAULT_ERROR_MESSAGE

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.message = message or self.default_message
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.message)


class ClientValidationError(StaffDocsError):
    """Input rejected before any request was sent."""

    default_message = "Invalid input"

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__("; ".join(self.field_errors.values()) or None)


class RequestValidationError(StaffDocsError):
    """400 - the server rejected the payload."""

    default_message = "Validation error"


class AuthenticationError(StaffDocsError):
    """401 that could not be recovered by a token refresh."""

    default_message = "Authentication required"


class SessionExpiredError(AuthenticationError):
    """Tokens were cleared and the user has to sign in again."""

    default_message = "Session expired, please sign in again"


class PermissionDeniedError(StaffDocsError):
    """403."""

    default_message = "Access denied"


class NotFoundError(StaffDocsError):
    """404."""

    default_message = "Resource not found"


class ServerError(StaffDocsError):
    """5xx or any status without a dedicated error class."""


class NetworkError(StaffDocsError):
    """No response was received."""

    default_message = NETWORK_ERROR_MESSAGE


_STATUS_ERRORS = {
    400: RequestValidationError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
}


def extract_error_message(payload: Any, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """
    Reduce a server error body to a single human readable message.

    Preference order: a list of field errors (joined with ", "), a
    ``message`` field, a ``title`` field, then ``fallback``.
    """
    if isinstance(payload, list):
        parts = []
        for item in payload:
            if isinstance(item, dict):
                text = item.get("description") or item.get("message") or str(item)
            else:
                text = str(item)
            parts.append(text)
        return ", ".join(parts) or fallback

    if isinstance(payload, dict):
        return payload.get("message") or payload.get("title") or fallback

    if isinstance(payload, str) and payload.strip():
        return payload.strip()

    return fallback


def _response_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def error_for_response(response: httpx.Response) -> StaffDocsError:
    """Build the exception for a non-success response."""
    status = response.status_code
    error_cls = _STATUS_ERRORS.get(status, ServerError)
    payload = _response_payload(response)
    message = extract_error_message(payload, fallback=error_cls.default_message)

    if status >= 500:
        logger.error(f"Server error {status} on {response.request.method} {response.request.url}: {payload!r}")
    else:
        logger.warning(f"Request failed with {status} on {response.request.method} {response.request.url}: {payload!r}")

    return error_cls(message, status_code=status, payload=payload)
