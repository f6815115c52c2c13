"""Request body encoding.

Payloads the transport can send as-is pass through; everything else is
serialized to JSON text. The checks run in a fixed order:

    binary blob -> UrlSearchParams -> FormData -> str -> JSON

Serialization errors (cyclic or unserializable values) are not caught.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from bim_fetch.models import FormData, UrlSearchParams

RequestBody = bytes | bytearray | memoryview | UrlSearchParams | FormData | str

_BLOB_TYPES = (bytes, bytearray, memoryview)


def encode_body(payload: Any) -> RequestBody:
    """Return ``payload`` in a form the transport accepts."""
    if isinstance(payload, _BLOB_TYPES):
        return payload
    if isinstance(payload, UrlSearchParams):
        return payload
    if isinstance(payload, FormData):
        return payload
    if isinstance(payload, str):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    # Same layout as JSON.stringify: no whitespace, non-ASCII kept verbatim.
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
