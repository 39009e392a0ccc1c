"""
cloud_sdk_core/utils/json_serializer.py

WHAT THIS FILE IS FOR
---------------------
This module turns request models into the compact JSON text that is
sent as a request body.

Service operations hand the request builder "a model": sometimes a
plain dict, sometimes a pydantic model, a dataclass, or a list of
JSON patch operations. This module normalizes all of those into
JSON-compatible primitives and encodes them without whitespace.

CORE FUNCTIONALITY
------------------
- Recursively walk dicts, lists, tuples and sets
- Dump pydantic models by alias (wire names, e.g. "from" for patch ops)
- Expand dataclasses field by field
- Encode enums by value and date/datetime as ISO-8601 strings
- Expand plain objects through their instance attributes
- Hand any other leaf (UUID, Decimal, ...) to pydantic-core
- Omit dict entries whose value is None (null fields are not sent)
- Never mutate the input object

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Parse response bodies
- Rename keys (wire names are declared on the models themselves)
- Perform I/O or logging

It is a **pure transformation utility**.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import json
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

_COMPACT_SEPARATORS = (",", ":")


def to_jsonable(obj: Any) -> Any:
    """
    Recursively convert a model into JSON-compatible primitives.

    None-valued dict entries are dropped at every level; None items
    inside lists are kept so positions stay stable.
    """
    # ---------- models ----------
    if isinstance(obj, BaseModel):
        return to_jsonable(obj.model_dump(mode="json", by_alias=True, exclude_none=True))

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable({f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)})

    # ---------- containers ----------
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items() if v is not None}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(x) for x in obj]

    # ---------- scalars ----------
    if isinstance(obj, enum.Enum):
        return to_jsonable(obj.value)

    if isinstance(obj, (dt.datetime, dt.date)):
        return obj.isoformat()

    if isinstance(obj, bytes):
        return obj.decode("utf-8")

    if obj is None or isinstance(obj, (str, int, float)):
        return obj

    # plain objects: instance attributes, like any other model
    if hasattr(obj, "__dict__"):
        return to_jsonable(vars(obj))

    # UUID, Decimal, Path, timedelta, ...
    return to_jsonable_python(obj)


def to_json(obj: Any) -> str:
    """Serialize a model to compact (non-pretty) JSON text."""
    return json.dumps(to_jsonable(obj), separators=_COMPACT_SEPARATORS, ensure_ascii=False)


def dumps_compact(obj: Any) -> str:
    """Encode an already JSON-shaped value as-is (nulls kept)."""
    return json.dumps(obj, separators=_COMPACT_SEPARATORS, ensure_ascii=False)
