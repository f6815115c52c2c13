"""Error types raised by the request pipeline.

Every failure the pipeline produces itself is a ClientError tagged with an
ErrorKind. Callers can branch on ``error.kind`` or catch the concrete
subclass. Transport failures (httpx errors) are never wrapped.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Which pipeline stage rejected the response."""

    STATUS = "status"  # Status code outside the accepted range
    DECODE = "decode"  # Content-Type missing or not understood


class ClientError(Exception):
    """Base class for pipeline errors.

    Attributes:
        kind: Which stage failed.
        message: Human-readable description.
        context: Diagnostic values (method, url, and stage-specific extras).
    """

    kind: ErrorKind

    def __init__(self, kind: ErrorKind, message: str, context: dict[str, Any]) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = context

    @property
    def method(self) -> str | None:
        return self.context.get("method")

    @property
    def url(self) -> str | None:
        return self.context.get("url")


class StatusError(ClientError):
    """Raised when a response status falls outside the accepted range.

    ``payload`` holds the JSON body the server sent with the error.
    """

    def __init__(
        self,
        payload: Any,
        url: str,
        method: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            ErrorKind.STATUS,
            _status_message(payload, url, method),
            {
                "method": method,
                "url": url,
                "status_code": status_code,
                "payload": payload,
            },
        )

    @property
    def payload(self) -> Any:
        return self.context["payload"]

    @property
    def status_code(self) -> int | None:
        return self.context["status_code"]


class DecodeError(ClientError):
    """Raised when the response Content-Type is missing or unrecognized."""

    def __init__(self, content_type: str | None, url: str, method: str) -> None:
        super().__init__(
            ErrorKind.DECODE,
            f"Couldn't parse Content-Type: {content_type}",
            {"method": method, "url": url, "content_type": content_type},
        )

    @property
    def content_type(self) -> str | None:
        return self.context["content_type"]


def _status_message(payload: Any, url: str, method: str) -> str:
    """Build the StatusError message, folding in server error fields if present."""
    if isinstance(payload, dict) and (
        "error_code" in payload or "display_message" in payload
    ):
        code = payload.get("error_code", "Error")
        message = f"{code} when making a {method} on resource {url}."
        if payload.get("display_message"):
            message += f"\n{payload['display_message']}"
        return message
    return (
        f"Error when making a {method} on resource {url}.\n"
        "See the payload attribute of the error to access the server response."
    )
