"""
cloud_sdk_core/http/request_builder.py

WHAT THIS FILE IS FOR
---------------------
This module assembles outgoing service requests.

Every generated service operation follows the same shape:

    url = resolve_request_url(service_url, "/v1/things/{thing_id}", {"thing_id": thing_id})
    request = (
        RequestBuilder.post(url)
        .header("X-Trace", trace_id)
        .query("version", "2024-01-01", "tags", ["a", "b"])
        .body_content("application/json", json_content=model)
        .build()
    )

It is responsible for:
- Resolving {name} path templates against a base service URL
- Accumulating query, form and header parameters (repeatable names)
- Choosing the request body from JSON model / JSON patch / raw content
- Producing a ServiceRequest with default headers and body rules applied

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Sending requests (see http_client.py / base_service.py)
- Retries, timeouts, TLS
- Interpreting responses or mapping status codes

ENCODING RULES
--------------
Path parameter values and query values are escaped differently:

- path segment: space -> %20, "/" -> %2F, sub-delims and ":@" literal
- query:        space -> "+", "&", "=", "+", "/" percent-encoded

A path template may already contain percent-encoded sequences; they
are kept verbatim. A "%" that does not start one becomes %25.

LIFECYCLE
---------
One builder per call. Configure with chained calls, finish with
build() or to_url(), then drop it. Builders are not thread-safe.
"""

from __future__ import annotations

import enum
import re
from typing import Any, BinaryIO, List, Mapping, Optional, Sequence, Union
from urllib.parse import SplitResult, quote, quote_plus, urlsplit, urlunsplit

from requests.structures import CaseInsensitiveDict

from cloud_sdk_core.http.service_request import (
    APPLICATION_JSON,
    HttpMethod,
    NameValue,
    Repeated,
    RequestBody,
    ServiceRequest,
)
from cloud_sdk_core.utils.json_serializer import dumps_compact, to_json

# Characters left literal inside a single path segment (RFC 3986 pchar
# minus the unreserved set, which quote() never escapes).
_PATH_SEGMENT_SAFE = "!$&'()*+,;=:@"

# Template text is already "encoded": keep separators, existing escapes
# and unresolved placeholders.
_PATH_TEMPLATE_SAFE = _PATH_SEGMENT_SAFE + "/%{}"

# "%" not starting a valid escape is itself encoded
_STRAY_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_BODYLESS_METHODS = {HttpMethod.GET, HttpMethod.HEAD}


# -------------------------------------------------------------------
# URL resolution
# -------------------------------------------------------------------
def escape_path_segment(value: str) -> str:
    """Percent-encode a value for use as exactly one path segment."""
    return quote(value, safe=_PATH_SEGMENT_SAFE)


def _canonicalize_path(path: str) -> str:
    return quote(_STRAY_PERCENT_RE.sub("%25", path), safe=_PATH_TEMPLATE_SAFE)


def _parse_service_url(service_url: Optional[str]) -> SplitResult:
    if not service_url:
        raise ValueError("The service_url cannot be null")

    parts = urlsplit(str(service_url))
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise ValueError(f"Invalid service_url (expected absolute http/https URL): {service_url!r}")

    # raises ValueError for a malformed port
    _ = parts.port
    return parts


def _with_appended_path(parts: SplitResult, encoded_path: str) -> str:
    base_path = parts.path or "/"
    if encoded_path:
        if not base_path.endswith("/"):
            base_path += "/"
        base_path += encoded_path
    return urlunsplit((parts.scheme, parts.netloc, base_path, parts.query, parts.fragment))


def resolve_request_url(
    service_url: str,
    path: Optional[str] = None,
    path_params: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Resolve {name} references in `path`, then append it to `service_url`.

    - Every path_params value must be non-empty (ValueError otherwise)
    - Each value is escaped as a single path segment before substitution
    - Placeholders with no matching parameter are left untouched
    - One leading "/" is dropped; the base URL's own path is kept

    Example:
        resolve_request_url("https://api.example.com/api", "/v1/files/{name}", {"name": "a b/c"})
        → "https://api.example.com/api/v1/files/a%20b%2Fc"
    """
    parts = _parse_service_url(service_url)

    resolved = path or ""
    for name, value in (path_params or {}).items():
        if value is None or str(value) == "":
            raise ValueError(f"Path parameter '{name}' is empty")
        resolved = resolved.replace("{%s}" % name, escape_path_segment(str(value)))

    if resolved.startswith("/"):
        resolved = resolved[1:]

    return _with_appended_path(parts, _canonicalize_path(resolved))


def construct_http_url(
    service_url: str,
    path_segments: Sequence[str],
    path_parameters: Optional[Sequence[str]] = None,
) -> str:
    """
    Older URL form: interleave path segments with escaped parameter values.

        construct_http_url(url, ["v1/workspaces", "counterexamples"], ["ws 1"])
        → url + "/v1/workspaces/ws%201/counterexamples"

    Empty segments and empty parameters are skipped.
    """
    parts = _parse_service_url(service_url)
    params = list(path_parameters or [])

    pieces: List[str] = []
    for i, segment in enumerate(path_segments):
        if segment:
            pieces.append(_canonicalize_path(segment.strip("/")))
        if i < len(params) and params[i]:
            pieces.append(escape_path_segment(params[i]))

    return _with_appended_path(parts, "/".join(p for p in pieces if p))


# -------------------------------------------------------------------
# Parameter accumulation
# -------------------------------------------------------------------
def _stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return _stringify(value.value)
    return str(value)


def as_param_value(value: Any) -> Any:
    """Tag list / tuple / set values as Repeated; everything else is a scalar."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return Repeated(value)
    return value


def add(params: List[NameValue], name: str, value: Any) -> None:
    """
    Append `name` with `value` to `params`.

    - None       -> one entry with no value (e.g. "?flag")
    - Repeated   -> one entry per element, same name, same order
    - other      -> one entry, stringified ("true"/"false" for bools)
    """
    value = as_param_value(value)
    if isinstance(value, Repeated):
        for item in value.values:
            params.append(NameValue(name, _stringify(item)))
    else:
        params.append(NameValue(name, _stringify(value)))


def with_params(params: List[NameValue], *args: Any) -> None:
    """Add alternating name/value arguments: with_params(p, "a", 1, "b", 2)."""
    if len(args) % 2 != 0:
        raise ValueError("need even number of arguments")
    for i in range(0, len(args), 2):
        add(params, str(args[i]), args[i + 1])


def _encode_query_param(param: NameValue) -> str:
    if param.value is None:
        return quote_plus(param.name)
    return f"{quote_plus(param.name)}={quote_plus(param.value)}"


# -------------------------------------------------------------------
# Builder
# -------------------------------------------------------------------
class RequestBuilder:
    """
    Chained, single-use builder for one outgoing request.

    Body rules applied by build():
    - GET / HEAD must not carry a body (RuntimeError)
    - form parameters replace any body set earlier
    - POST / PUT / PATCH / DELETE with no body get an empty one
    """

    def __init__(self, method: HttpMethod, url: str):
        if not url:
            raise ValueError("url cannot be null")

        self.method = HttpMethod(method)
        self._url = str(url)
        self._body: Optional[RequestBody] = None
        self._form_params: List[NameValue] = []
        self._headers: List[NameValue] = []
        self._query_params: List[NameValue] = []

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #
    @classmethod
    def delete(cls, url: str) -> "RequestBuilder":
        return cls(HttpMethod.DELETE, url)

    @classmethod
    def get(cls, url: str) -> "RequestBuilder":
        return cls(HttpMethod.GET, url)

    @classmethod
    def post(cls, url: str) -> "RequestBuilder":
        return cls(HttpMethod.POST, url)

    @classmethod
    def put(cls, url: str) -> "RequestBuilder":
        return cls(HttpMethod.PUT, url)

    @classmethod
    def patch(cls, url: str) -> "RequestBuilder":
        return cls(HttpMethod.PATCH, url)

    @classmethod
    def head(cls, url: str) -> "RequestBuilder":
        return cls(HttpMethod.HEAD, url)

    # ------------------------------------------------------------------ #
    # Parameters
    # ------------------------------------------------------------------ #
    def query(self, *args: Any) -> "RequestBuilder":
        with_params(self._query_params, *args)
        return self

    def form(self, *args: Any) -> "RequestBuilder":
        with_params(self._form_params, *args)
        return self

    def header(self, *args: Any) -> "RequestBuilder":
        with_params(self._headers, *args)
        return self

    # ------------------------------------------------------------------ #
    # Body
    # ------------------------------------------------------------------ #
    def body(self, body: Optional[RequestBody]) -> "RequestBuilder":
        self._body = body
        return self

    def body_content_string(self, content: str, content_type: Optional[str]) -> "RequestBuilder":
        return self.body(RequestBody.from_string(content, content_type))

    def body_content_stream(self, stream: BinaryIO, content_type: Optional[str]) -> "RequestBuilder":
        return self.body(RequestBody.from_stream(stream, content_type))

    def body_content(
        self,
        content_type: Optional[str],
        json_content: Any = None,
        json_patch_content: Any = None,
        non_json_content: Union[str, bytes, BinaryIO, None] = None,
    ) -> "RequestBuilder":
        """
        Set the body from the first non-None source, in this order:

        1) json_content        -> compact JSON
        2) json_patch_content  -> compact JSON
        3) non_json_content    -> str (UTF-8), bytes or binary stream, verbatim

        Nothing is set when content_type is None, whatever the other
        arguments hold. Nothing is set when all three sources are None.
        """
        if content_type is None:
            return self

        if json_content is not None:
            return self.body_content_string(to_json(json_content), content_type)
        if json_patch_content is not None:
            return self.body_content_string(to_json(json_patch_content), content_type)
        if isinstance(non_json_content, str):
            return self.body_content_string(non_json_content, content_type)
        if isinstance(non_json_content, (bytes, bytearray)):
            return self.body(RequestBody(bytes(non_json_content), content_type))
        if non_json_content is not None:
            return self.body_content_stream(non_json_content, content_type)
        return self

    def body_json(self, json_obj: Any, media_type: str = APPLICATION_JSON) -> "RequestBuilder":
        """Send an already JSON-shaped object as-is (explicit nulls are kept)."""
        return self.body_content_string(dumps_compact(json_obj), media_type)

    # ------------------------------------------------------------------ #
    # Terminal calls
    # ------------------------------------------------------------------ #
    def build(self) -> ServiceRequest:
        body = self._body

        if self.method in _BODYLESS_METHODS:
            if body is not None:
                raise RuntimeError("cannot send a request body in a GET or HEAD request")
        elif self._form_params:
            body = RequestBody.form(self._form_params)
        elif body is None:
            body = RequestBody.empty()

        # Accept first, explicit headers after it (last write wins)
        headers: CaseInsensitiveDict = CaseInsensitiveDict()
        headers["Accept"] = APPLICATION_JSON
        for h in self._headers:
            if h.value is None:
                continue
            headers[h.name] = h.value

        return ServiceRequest(method=self.method, url=self.to_url(), headers=headers, body=body)

    def to_url(self) -> str:
        """Request URL including every accumulated query parameter."""
        if not self._query_params:
            return self._url

        parts = urlsplit(self._url)
        if not parts.path:
            parts = parts._replace(path="/")
        encoded = "&".join(_encode_query_param(p) for p in self._query_params)
        query = f"{parts.query}&{encoded}" if parts.query else encoded
        return urlunsplit(parts._replace(query=query))

    def __repr__(self) -> str:
        return (
            f"RequestBuilder [method={self.method.value}, formParams={self._form_params}, "
            f"headers={self._headers}, queryParams={self._query_params}, httpUrl={self._url}]"
        )
