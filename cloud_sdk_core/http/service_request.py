"""
cloud_sdk_core/http/service_request.py

WHAT THIS FILE IS FOR
---------------------
Plain data types shared by the request builder, the transport wrapper
and the service layer:

- HttpMethod:     the verbs the builder can produce
- NameValue:      one query / form / header entry (value may be absent)
- Repeated:       explicit marker for a multi-valued parameter
- RequestBody:    opaque content + declared content type
- ServiceRequest: the fully assembled request handed to a transport

These types carry no behavior beyond construction helpers.
Path and query encoding rules live in request_builder.py.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterable, Optional, Tuple, Union
from urllib.parse import urlencode

from requests.structures import CaseInsensitiveDict

APPLICATION_JSON = "application/json"
FORM_URLENCODED = "application/x-www-form-urlencoded"

BodyContent = Union[bytes, BinaryIO]


class HttpMethod(str, enum.Enum):
    DELETE = "DELETE"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    HEAD = "HEAD"


@dataclass(frozen=True)
class NameValue:
    name: str
    value: Optional[str] = None


@dataclass(frozen=True, init=False)
class Repeated:
    """
    A parameter value that expands to one entry per element.

    query("tags", Repeated(["a", "b"])) emits tags=a&tags=b.
    """

    values: Tuple[Any, ...]

    def __init__(self, values: Iterable[Any]):
        object.__setattr__(self, "values", tuple(values))


@dataclass(frozen=True)
class RequestBody:
    content: BodyContent
    content_type: Optional[str] = None

    @classmethod
    def from_string(cls, content: str, content_type: Optional[str]) -> "RequestBody":
        return cls(content.encode("utf-8"), content_type)

    @classmethod
    def from_stream(cls, stream: BinaryIO, content_type: Optional[str]) -> "RequestBody":
        return cls(stream, content_type)

    @classmethod
    def empty(cls) -> "RequestBody":
        return cls(b"", None)

    @classmethod
    def form(cls, params: Iterable[NameValue]) -> "RequestBody":
        pairs = [(p.name, p.value if p.value is not None else "") for p in params]
        return cls(urlencode(pairs).encode("ascii"), FORM_URLENCODED)

    @property
    def is_stream(self) -> bool:
        return not isinstance(self.content, (bytes, bytearray))


@dataclass
class ServiceRequest:
    """
    Fully resolved request, ready for a transport.

    - url already contains the encoded query string
    - headers is case-insensitive; the last write for a name wins
    - body is None only for GET / HEAD
    """

    method: HttpMethod
    url: str
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: Optional[RequestBody] = None

    @property
    def content_type(self) -> Optional[str]:
        if self.body is not None and self.body.content_type:
            return self.body.content_type
        return self.headers.get("Content-Type")

    def wire_headers(self) -> Dict[str, str]:
        """Headers as sent: the body's content type replaces any Content-Type header."""
        headers = CaseInsensitiveDict(self.headers)
        if self.body is not None and self.body.content_type:
            headers["Content-Type"] = self.body.content_type
        return dict(headers.items())
