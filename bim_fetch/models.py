"""Data models for bim-fetch.

Configuration and transport options use Pydantic v2. Request payload
containers (UrlSearchParams, FormData) are plain dataclasses because the
body encoder dispatches on their runtime type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json, text/plain, */*, multipart/form-data",
}


# =============================================================================
# Client Configuration Models
# =============================================================================


class RequestMode(str, Enum):
    """Request mode handed to the transport with every call."""

    CORS = "cors"
    SAME_ORIGIN = "same-origin"
    NO_CORS = "no-cors"
    NAVIGATE = "navigate"


class ClientConfig(BaseModel):
    """Mutable per-client state: base URL, default headers and mode.

    Mutated only through FetchClient setters.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    base_url: str = Field(default="", description="Prefix for relative request targets")
    default_headers: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HEADERS),
        description="Headers sent with every request (call headers win on conflict)",
    )
    mode: RequestMode = Field(default=RequestMode.CORS, description="Request mode")


class RequestOptions(BaseModel):
    """Options passed to the transport alongside the resolved URL."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    method: str = Field(description="HTTP method (GET, POST, PUT, DELETE)")
    headers: dict[str, str] = Field(default_factory=dict, description="Merged request headers")
    body: Any = Field(default=None, description="Encoded request body, if any")
    mode: RequestMode = Field(default=RequestMode.CORS, description="Request mode")


class ClientsFile(BaseModel):
    """Top-level client configuration file structure."""

    model_config = ConfigDict(extra="forbid")

    clients: dict[str, ClientConfig] = Field(description="Profile name -> client config")


# =============================================================================
# Request Payload Containers
# =============================================================================


@dataclass
class UrlSearchParams:
    """Ordered key/value pairs sent as an application/x-www-form-urlencoded body."""

    pairs: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> UrlSearchParams:
        return cls([(str(k), str(v)) for k, v in data.items()])

    def append(self, name: str, value: str) -> None:
        self.pairs.append((name, value))

    def get(self, name: str) -> str | None:
        for key, value in self.pairs:
            if key == name:
                return value
        return None

    def __str__(self) -> str:
        return urlencode(self.pairs)


@dataclass
class FormFile:
    """A file part of a multipart form."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class FormData:
    """Ordered multipart form fields.

    Used both as a request payload and as the decoded value of
    multipart/form-data and form-encoded responses. A field name may repeat.
    """

    entries: list[tuple[str, str | FormFile]] = field(default_factory=list)

    def append(self, name: str, value: str | FormFile) -> None:
        self.entries.append((name, value))

    def get(self, name: str) -> str | FormFile | None:
        for key, value in self.entries:
            if key == name:
                return value
        return None

    def get_all(self, name: str) -> list[str | FormFile]:
        return [value for key, value in self.entries if key == name]

    def keys(self) -> list[str]:
        seen: list[str] = []
        for key, _ in self.entries:
            if key not in seen:
                seen.append(key)
        return seen

    def fields(self) -> list[tuple[str, str]]:
        """Plain (non-file) entries."""
        return [(k, v) for k, v in self.entries if isinstance(v, str)]

    def files(self) -> list[tuple[str, FormFile]]:
        """File entries."""
        return [(k, v) for k, v in self.entries if isinstance(v, FormFile)]

    def __iter__(self) -> Iterator[tuple[str, str | FormFile]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
