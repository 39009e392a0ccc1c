"""
cloud_sdk_core/service/exceptions.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single canonical mapping* from HTTP error
status codes to typed exceptions raised by service calls.

STATUS MAPPING
--------------
    400 -> BadRequestException
    401 -> UnauthorizedException
    403 -> ForbiddenException
    404 -> NotFoundException
    409 -> ConflictException
    413 -> RequestTooLargeException
    415 -> UnsupportedException
    429 -> TooManyRequestsException
    500 -> InternalServerErrorException
    503 -> ServiceUnavailableException
    any other status >= 400 -> ServiceResponseException

Every exception carries the raw response so callers can inspect
headers and body. Both `requests.Response` and `httpx.Response` are
accepted (only status_code, headers, text and json() are used).

ERROR MESSAGE EXTRACTION
------------------------
Services report errors in several JSON shapes. The first match wins:

    {"errors": [{"message": "..."}]}
    {"error": "..."}
    {"message": "..."}
    {"errorMessage": "..."}

Otherwise the HTTP reason phrase is used, then "Unknown error".

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Decide whether a call is retried
- Log or swallow errors
- Build requests
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

UNKNOWN_ERROR = "Unknown error"


def _extract_error_message(response: Any) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None

    if not isinstance(data, dict):
        return None

    errors = data.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        message = errors[0].get("message")
        if message:
            return str(message)

    for key in ("error", "message", "errorMessage"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value

    return None


def _reason_phrase(response: Any) -> Optional[str]:
    return getattr(response, "reason", None) or getattr(response, "reason_phrase", None)


class ServiceResponseException(Exception):
    """Base error for a service call that returned status >= 400."""

    def __init__(self, status_code: int, response: Any):
        self.status_code = status_code
        self.response = response
        self.headers: Dict[str, str] = dict(getattr(response, "headers", {}) or {})
        self.message = _extract_error_message(response) or _reason_phrase(response) or UNKNOWN_ERROR
        super().__init__(f"Error: {self.message}, Status code: {self.status_code}")

    @property
    def debugging_info(self) -> Any:
        """Parsed JSON error body, or None when the body is not JSON."""
        try:
            return self.response.json()
        except ValueError:
            return None


class BadRequestException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(400, response)


class UnauthorizedException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(401, response)


class ForbiddenException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(403, response)


class NotFoundException(ServiceResponseException):
    """404 Not Found."""

    def __init__(self, response: Any):
        super().__init__(404, response)


class ConflictException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(409, response)


class RequestTooLargeException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(413, response)


class UnsupportedException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(415, response)


class TooManyRequestsException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(429, response)


class InternalServerErrorException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(500, response)


class ServiceUnavailableException(ServiceResponseException):
    def __init__(self, response: Any):
        super().__init__(503, response)


_EXCEPTIONS_BY_STATUS: Dict[int, Type[ServiceResponseException]] = {
    400: BadRequestException,
    401: UnauthorizedException,
    403: ForbiddenException,
    404: NotFoundException,
    409: ConflictException,
    413: RequestTooLargeException,
    415: UnsupportedException,
    429: TooManyRequestsException,
    500: InternalServerErrorException,
    503: ServiceUnavailableException,
}


def exception_for_response(response: Any) -> ServiceResponseException:
    """Return (not raise) the typed exception for an error response."""
    exc_type = _EXCEPTIONS_BY_STATUS.get(response.status_code)
    if exc_type is None:
        return ServiceResponseException(response.status_code, response)
    return exc_type(response)


def raise_for_status(response: Any) -> None:
    """Raise the mapped exception when status >= 400; no-op otherwise."""
    if response.status_code >= 400:
        raise exception_for_response(response)
