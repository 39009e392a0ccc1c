# tests/test_exceptions.py
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import pytest

from cloud_sdk_core.service import exceptions as exc_mod
from cloud_sdk_core.service.exceptions import (
    NotFoundException,
    ServiceResponseException,
    exception_for_response,
    raise_for_status,
)


class _FakeResponse:
    def __init__(
        self,
        status_code: int,
        payload: Any = None,
        reason: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self.headers = headers or {}
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self) -> Any:
        return json.loads(self.text)


@pytest.mark.parametrize(
    "status_code, exc_type",
    [
        (400, exc_mod.BadRequestException),
        (401, exc_mod.UnauthorizedException),
        (403, exc_mod.ForbiddenException),
        (404, exc_mod.NotFoundException),
        (409, exc_mod.ConflictException),
        (413, exc_mod.RequestTooLargeException),
        (415, exc_mod.UnsupportedException),
        (429, exc_mod.TooManyRequestsException),
        (500, exc_mod.InternalServerErrorException),
        (503, exc_mod.ServiceUnavailableException),
    ],
)
def test_exception_for_response_maps_known_statuses(status_code: int, exc_type: type) -> None:
    resp = _FakeResponse(status_code)
    exc = exception_for_response(resp)
    assert type(exc) is exc_type
    assert isinstance(exc, ServiceResponseException)
    assert exc.status_code == status_code
    assert exc.response is resp


def test_exception_for_response_unknown_status_uses_base_type() -> None:
    exc = exception_for_response(_FakeResponse(418, reason="I'm a teapot"))
    assert type(exc) is ServiceResponseException
    assert exc.status_code == 418
    assert exc.message == "I'm a teapot"


def test_not_found_carries_response_and_headers() -> None:
    resp = _FakeResponse(404, {"error": "widget not found"}, headers={"X-Request-Id": "r-1"})

    with pytest.raises(NotFoundException) as info:
        raise_for_status(resp)

    assert info.value.response is resp
    assert info.value.message == "widget not found"
    assert info.value.headers == {"X-Request-Id": "r-1"}
    assert info.value.debugging_info == {"error": "widget not found"}
    assert "Status code: 404" in str(info.value)


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"errors": [{"message": "first"}], "error": "second"}, "first"),
        ({"error": "from error"}, "from error"),
        ({"message": "from message"}, "from message"),
        ({"errorMessage": "from errorMessage"}, "from errorMessage"),
    ],
)
def test_error_message_extraction_order(payload: Dict[str, Any], expected: str) -> None:
    assert exception_for_response(_FakeResponse(400, payload)).message == expected


def test_error_message_falls_back_to_unknown_error() -> None:
    exc = exception_for_response(_FakeResponse(500))
    assert exc.message == "Unknown error"
    assert exc.debugging_info is None


def test_raise_for_status_is_noop_below_400() -> None:
    raise_for_status(_FakeResponse(200))
    raise_for_status(_FakeResponse(304))
