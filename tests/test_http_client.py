# tests/test_http_client.py
from __future__ import annotations

from typing import Any, List

import requests

from cloud_sdk_core.http.http_client import HttpClient
from cloud_sdk_core.http.request_builder import RequestBuilder

URL = "https://api.example.com/v1/things"


class _FakeSession:
    """Records prepared requests instead of sending them."""

    def __init__(self) -> None:
        self._real = requests.Session()
        self.sent: List[Any] = []
        self.kwargs: List[dict] = []

    def prepare_request(self, request: requests.Request) -> requests.PreparedRequest:
        return self._real.prepare_request(request)

    def send(self, prepared: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        self.sent.append(prepared)
        self.kwargs.append(kwargs)
        resp = requests.Response()
        resp.status_code = 200
        resp._content = b"{}"
        return resp


def test_to_requests_uses_body_content_type() -> None:
    req = (
        RequestBuilder.post(URL)
        .header("Content-Type", "text/plain", "X-Trace", "t-1")
        .body_json({"a": 1})
        .build()
    )

    out = HttpClient.to_requests(req)

    assert out.method == "POST"
    assert out.url == URL
    assert out.data == b'{"a":1}'
    assert out.headers["Content-Type"] == "application/json"
    assert out.headers["Accept"] == "application/json"
    assert out.headers["X-Trace"] == "t-1"
    assert len([k for k in out.headers if k.lower() == "content-type"]) == 1


def test_to_requests_get_has_no_data() -> None:
    out = HttpClient.to_requests(RequestBuilder.get(URL).query("a", 1).build())
    assert out.method == "GET"
    assert out.url == URL + "?a=1"
    assert out.data is None


def test_send_passes_timeout_and_verify() -> None:
    session = _FakeSession()
    client = HttpClient(timeout_seconds=(3.0, 30.0), verify=False, session=session)  # type: ignore[arg-type]

    resp = client.send(RequestBuilder.put(URL).body_content_string("x", "text/plain").build())

    assert resp.status_code == 200
    prepared = session.sent[0]
    assert prepared.method == "PUT"
    assert prepared.body == b"x"
    assert prepared.headers["Content-Type"] == "text/plain"
    assert session.kwargs[0] == {"timeout": (3.0, 30.0), "verify": False}


def test_send_timeout_override_per_call() -> None:
    session = _FakeSession()
    client = HttpClient(timeout_seconds=60, session=session)  # type: ignore[arg-type]

    client.send(RequestBuilder.get(URL).build(), timeout_seconds=5)

    assert session.kwargs[0]["timeout"] == 5
    assert session.kwargs[0]["verify"] is True
