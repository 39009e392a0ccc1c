# -------------------------------------------------------------------
# cloud_sdk_core/schemas/json_patch.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the JSON Patch (RFC 6902) operation model used
# as a request body by PATCH-style service operations.
#
# A list of JsonPatchOperation instances is passed to
# RequestBuilder.body_content(..., json_patch_content=ops) and is
# serialized to a compact JSON array.
#
# KEY DESIGN DECISION
# -------------------
# "from" is a Python keyword, so the field is named from_ and mapped to
# the wire name via alias="from". Serialization always uses aliases.
#
# populate_by_name=True allows both spellings on input:
#   - JsonPatchOperation(op="move", path="/a", from_="/b")
#   - JsonPatchOperation.model_validate({"op": "move", "path": "/a", "from": "/b"})
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class JsonPatchOperation(BaseModel):
    """
    One JSON Patch operation.

    value is omitted from the wire form when None.
    """

    model_config = ConfigDict(populate_by_name=True)

    op: Literal["add", "remove", "replace", "move", "copy", "test"] = Field(
        ...,
        description="Operation to perform",
    )

    path: str = Field(
        ...,
        description="JSON Pointer to the target location",
    )

    from_: Optional[str] = Field(
        None,
        alias="from",
        description="Source JSON Pointer (move / copy only)",
    )

    value: Optional[Any] = Field(
        None,
        description="Value to add, replace or test",
    )
