"""Response body decoding keyed on the Content-Type header.

Dispatch is a case-sensitive substring match, first hit wins:

    application/json                   -> parsed JSON value
    text/plain                         -> str
    application/octet-stream           -> bytes
    multipart/form-data or
    application/x-www-form-encoded     -> FormData

A missing header or a value matching none of these raises DecodeError
without reading the body. The form-encoded token is matched literally,
so ``application/x-www-form-urlencoded`` does not match it.
"""

from __future__ import annotations

import json
import logging
from email import policy
from email.parser import BytesParser
from typing import Any
from urllib.parse import parse_qsl

import httpx

from bim_fetch.errors import DecodeError
from bim_fetch.models import FormData, FormFile

logger = logging.getLogger(__name__)


async def decode_response(
    response: httpx.Response,
    url: str,
    method: str,
    log: logging.Logger | None = None,
) -> Any:
    """Read and decode the body of ``response``.

    Args:
        response: Response with an unread body. The body is consumed.
        url: Resolved request URL, for error context.
        method: HTTP method, for error context.
        log: Receives a DEBUG record naming the chosen branch. Defaults
            to this module's logger.

    Raises:
        DecodeError: If Content-Type is absent or not recognized.
    """
    log = log or logger
    content_type = response.headers.get("Content-Type")
    if not content_type:
        raise DecodeError(content_type, url, method)

    if "application/json" in content_type:
        log.debug("Decoding %s %s response as json", method, url)
        content = await response.aread()
        return json.loads(content)

    if "text/plain" in content_type:
        log.debug("Decoding %s %s response as text", method, url)
        await response.aread()
        return response.text

    if "application/octet-stream" in content_type:
        log.debug("Decoding %s %s response as binary", method, url)
        return await response.aread()

    if (
        "multipart/form-data" in content_type
        or "application/x-www-form-encoded" in content_type
    ):
        log.debug("Decoding %s %s response as form data", method, url)
        content = await response.aread()
        if "multipart/form-data" in content_type:
            return parse_multipart(content, content_type)
        return parse_form_encoded(content)

    raise DecodeError(content_type, url, method)


def parse_multipart(content: bytes, content_type: str) -> FormData:
    """Parse a multipart/form-data body into FormData.

    Parts without a ``name`` disposition parameter are skipped. Parts with a
    filename become FormFile entries; the rest are decoded as text using the
    part charset (UTF-8 when absent).
    """
    # The email parser needs the boundary, which lives in the header.
    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n"
    message = BytesParser(policy=policy.HTTP).parsebytes(head.encode("latin-1") + content)

    form = FormData()
    if not message.is_multipart():
        return form

    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if name is None:
            continue
        payload = part.get_payload(decode=True) or b""
        filename = part.get_filename()
        if filename is not None:
            form.append(name, FormFile(filename, payload, part.get_content_type()))
        else:
            form.append(name, _decode_text(payload, part.get_content_charset()))
    return form


def _decode_text(payload: bytes, charset: str | None) -> str:
    """Decode a text part, falling back to UTF-8 for unknown charsets."""
    try:
        return payload.decode(charset or "utf-8", errors="replace")
    except LookupError:
        logger.debug("Unknown multipart charset %r, decoding as utf-8", charset)
        return payload.decode("utf-8", errors="replace")


def parse_form_encoded(content: bytes) -> FormData:
    """Parse ``a=1&b=2`` style bodies into FormData, keeping blank values."""
    pairs = parse_qsl(content.decode("utf-8"), keep_blank_values=True)
    return FormData([(key, value) for key, value in pairs])
