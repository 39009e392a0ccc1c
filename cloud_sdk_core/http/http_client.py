"""
cloud_sdk_core/http/http_client.py

WHAT THIS FILE IS FOR
---------------------
This module provides a minimal, synchronous transport for sending a
ServiceRequest (built by RequestBuilder) with `requests`.

It exists to:
- Translate a ServiceRequest into a `requests.Request`
- Standardize timeout handling and TLS verification
- Keep one `requests.Session` (connection reuse) per client

This client is intentionally kept *very thin*.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Retry logic
- Logging or structured tracing
- Error translation (see service/exceptions.py)
- Response parsing

Those responsibilities belong to BaseService.

RELATIONSHIP TO base_service.py
-------------------------------
- http_client.py:
    * Synchronous (requests)
    * Generic, transport-only
    * No retries

- base_service.py:
    * Sync path goes through this client
    * Async path uses httpx.AsyncClient with retries
    * Maps status codes to exceptions, parses responses
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

import requests

from cloud_sdk_core.http.service_request import ServiceRequest

# Timeout can be:
# - single float -> applied to both connect + read
# - (connect_timeout, read_timeout)
TimeoutType = Union[float, Tuple[float, float]]


class HttpClient:
    """
    Minimal synchronous HTTP client wrapper.

    TIMEOUT SEMANTICS
    -----------------
    `timeout_seconds` is passed directly to `requests.Session.send`:
    - a single float is used for both connect + read
    - a (connect, read) tuple splits them

    CONTENT TYPE
    ------------
    The body's declared content type is sent as Content-Type and takes
    precedence over a Content-Type header set on the request.
    """

    def __init__(
        self,
        timeout_seconds: TimeoutType = 60,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.verify = verify
        self.session = session or requests.Session()

    @staticmethod
    def to_requests(request: ServiceRequest) -> requests.Request:
        """Convert a ServiceRequest into an unprepared `requests.Request`."""
        return requests.Request(
            method=request.method.value,
            url=request.url,
            headers=request.wire_headers(),
            data=request.body.content if request.body is not None else None,
        )

    def send(
        self,
        request: ServiceRequest,
        timeout_seconds: Optional[TimeoutType] = None,
    ) -> requests.Response:
        """
        Send a built request.

        Raises:
            requests.RequestException:
                Any network-level error (timeout, DNS, connection error).
                The caller translates it.
        """
        prepared = self.session.prepare_request(self.to_requests(request))
        return self.session.send(
            prepared,
            timeout=timeout_seconds if timeout_seconds is not None else self.timeout_seconds,
            verify=self.verify,
        )
