"""
cloud_sdk_core/service/base_service.py

WHAT THIS FILE IS FOR
---------------------
Base class for generated service clients. A concrete service subclasses
it and implements one method per API operation:

    class WidgetService(BaseService):
        def get_widget(self, widget_id: str) -> DetailedResponse:
            url = self.resolve_url("/v1/widgets/{widget_id}", {"widget_id": widget_id})
            return self.send(RequestBuilder.get(url).build())

It is responsible for:
- Holding the service URL and default headers (User-Agent + custom)
- Sending a built ServiceRequest synchronously (requests) or
  asynchronously (httpx, with retries)
- Mapping error statuses to typed exceptions
- Parsing successful responses into a DetailedResponse

CALL FLOW
---------
Service operation
  → RequestBuilder ... .build()          (request assembly)
  → BaseService.send / send_async        (defaults, transport)
      → HttpClient.send                  (sync, requests)
      → httpx.AsyncClient.request        (async, retried)
  → exception_for_response / DetailedResponse

ERROR HANDLING RULES
--------------------
- HTTP status >= 400 → ServiceResponseException subclass (see exceptions.py)
- Transport failures propagate as the transport's own exception
  (requests.RequestException / httpx.RequestError)
- JSON content type with an unparseable body → RuntimeError
- Only send_async retries: on httpx.RequestError and on 429 / 5xx

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Log request or response bodies
- Implement authentication
- Know about any specific service's operations
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import anyio.to_thread
import httpx
import requests
import structlog

from cloud_sdk_core.http.http_client import HttpClient
from cloud_sdk_core.http.request_builder import resolve_request_url
from cloud_sdk_core.http.service_request import ServiceRequest
from cloud_sdk_core.service.exceptions import exception_for_response
from cloud_sdk_core.utils.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

USER_AGENT_HEADER = "User-Agent"


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


@dataclass
class DetailedResponse:
    """
    Outcome of a successful call.

    result is the parsed JSON body for JSON responses, the text for
    anything else, and None for an empty body.
    """

    result: Any
    headers: Dict[str, str] = field(default_factory=dict)
    status_code: int = 200


def _parse_result(response: Any) -> Any:
    if not response.content:
        return None

    content_type = (response.headers.get("Content-Type") or "").lower()
    if "json" not in content_type:
        return response.text

    try:
        return response.json()
    except ValueError as exc:
        raise RuntimeError(f"Service returned invalid JSON (status={response.status_code})") from exc


class BaseService:
    """
    Common plumbing for service clients.

    settings defaults to the process-wide get_settings(). The service URL
    comes from the constructor argument, else from settings.service_url.
    It can be changed later with set_service_url().
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        service_url: Optional[str] = None,
        http_client: Optional[HttpClient] = None,
    ) -> None:
        settings = settings or get_settings()
        self.settings = settings
        self.service_url: Optional[str] = None
        self.default_headers: Dict[str, str] = {}

        self._timeout = settings.http_timeout_seconds
        self._max_retries = settings.max_retries
        self._verify = not settings.disable_ssl_verification
        self.http = http_client or HttpClient(timeout_seconds=self._timeout, verify=self._verify)

        url = service_url or settings.service_url
        if url:
            self.set_service_url(str(url))

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #
    def set_service_url(self, service_url: str) -> None:
        """Validate and store the base URL (a trailing "/" is dropped)."""
        # raises ValueError for an empty or non-absolute URL
        resolve_request_url(service_url)
        self.service_url = service_url.rstrip("/")

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        """Headers added to every request that does not already set them."""
        self.default_headers = dict(headers)

    def resolve_url(self, path: str, path_params: Optional[Mapping[str, Any]] = None) -> str:
        if not self.service_url:
            raise ValueError("service_url is not set")
        return resolve_request_url(self.service_url, path, path_params)

    # ------------------------------------------------------------------ #
    # Sending
    # ------------------------------------------------------------------ #
    def send(self, request: ServiceRequest) -> DetailedResponse:
        """Send synchronously; no retries."""
        self._apply_default_headers(request)

        try:
            resp = self.http.send(request)
        except requests.RequestException as exc:
            logger.error(
                "service_request_transport_error",
                method=request.method.value,
                url=request.url,
                error=str(exc),
            )
            raise

        return self._handle_response(request, resp)

    async def send_async(self, request: ServiceRequest) -> DetailedResponse:
        """
        Send with httpx.AsyncClient.

        - Retries: max_retries=2 => attempts=3
        - Retried: httpx.RequestError, 429 and 5xx responses
        - After the last attempt the error (or mapped exception) is raised
        """
        self._apply_default_headers(request)
        ctx = {"method": request.method.value, "url": request.url}
        attempts = self._max_retries + 1

        content = None
        if request.body is not None:
            content = request.body.content
            if request.body.is_stream:
                # AsyncClient cannot consume a sync stream; read it off the event loop
                content = await anyio.to_thread.run_sync(request.body.content.read)

        last_exc: Exception | None = None

        async with httpx.AsyncClient(timeout=self._timeout, verify=self._verify) as client:
            for attempt in range(1, attempts + 1):
                try:
                    resp = await client.request(
                        request.method.value,
                        request.url,
                        headers=request.wire_headers(),
                        content=content,
                    )
                except httpx.RequestError as exc:
                    last_exc = exc
                    logger.warning(
                        "service_request_attempt_failed",
                        attempt=attempt,
                        max_retries=self._max_retries,
                        error=str(exc),
                        **ctx,
                    )
                    if attempt >= attempts:
                        logger.error("service_request_exhausted_retries", attempts=attempt, error=str(exc), **ctx)
                        raise
                    continue

                if _is_retryable_status(resp.status_code) and attempt < attempts:
                    logger.warning(
                        "service_request_retry",
                        attempt=attempt,
                        status_code=resp.status_code,
                        **ctx,
                    )
                    continue

                return self._handle_response(request, resp)

        assert last_exc is not None
        raise last_exc

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _apply_default_headers(self, request: ServiceRequest) -> None:
        defaults = {USER_AGENT_HEADER: self.settings.user_agent, **self.default_headers}
        for name, value in defaults.items():
            if name not in request.headers:
                request.headers[name] = value

    def _handle_response(self, request: ServiceRequest, resp: Any) -> DetailedResponse:
        if resp.status_code >= 400:
            exc = exception_for_response(resp)
            logger.warning(
                "service_request_failed",
                method=request.method.value,
                url=request.url,
                status_code=resp.status_code,
                error=exc.message,
            )
            raise exc

        logger.info(
            "service_request_success",
            method=request.method.value,
            url=request.url,
            status_code=resp.status_code,
        )
        return DetailedResponse(
            result=_parse_result(resp),
            headers=dict(resp.headers),
            status_code=resp.status_code,
        )
