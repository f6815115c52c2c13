"""FetchClient - verb methods over the request/response pipeline.

Each call runs: resolve URL (+ query for GET) -> transport -> status
validation -> body decoding. A rejected status skips decoding, so the body
is read at most once.

Configuration is read when a call starts. Setters are not synchronized with
in-flight requests; changing the base URL or headers while calls are
pending may or may not affect them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from bim_fetch.body import encode_body
from bim_fetch.decoding import decode_response
from bim_fetch.models import ClientConfig, RequestMode, RequestOptions
from bim_fetch.status import validate_status
from bim_fetch.transport import HttpxTransport, Transport
from bim_fetch.urls import encode_query, resolve_url


class FetchClient:
    """Asynchronous HTTP client with a base URL and default headers.

    Usage:
        client = FetchClient("https://api.example.com")
        try:
            users = await client.get("users", {"id": [1, 2]})
        finally:
            await client.aclose()

    Or with an async context manager:
        async with FetchClient("https://api.example.com") as client:
            created = await client.post("users", {"name": "Ada"})
    """

    def __init__(
        self,
        base_url: str,
        transport: Transport | None = None,
        *,
        mode: RequestMode | str = RequestMode.CORS,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Prefix for relative request targets.
            transport: Coroutine function performing the HTTP call. When
                omitted, an HttpxTransport is created and owned by the client.
            mode: Request mode passed to the transport with every call.
            logger: Logger for request and decode diagnostics.
        """
        self._config = ClientConfig(mode=RequestMode(mode))
        self._owned_transport: HttpxTransport | None = None
        if transport is None:
            self._owned_transport = HttpxTransport()
            transport = self._owned_transport
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)
        self.set_default_url(base_url)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: Transport | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> "FetchClient":
        """Build a client from a loaded ClientConfig (see config_loader)."""
        client = cls(config.base_url, transport, mode=config.mode, logger=logger)
        client.set_headers(config.default_headers)
        return client

    async def __aenter__(self) -> "FetchClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if the client created it."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def set_headers(self, headers: Mapping[str, str]) -> None:
        """Merge ``headers`` over the default headers; new values win."""
        self._config.default_headers = {**self._config.default_headers, **headers}

    def set_default_url(self, url: str) -> None:
        self._config.base_url = url

    def set_mode(self, mode: RequestMode | str) -> None:
        """Change the request mode. Raises ValueError for unknown modes."""
        self._config.mode = RequestMode(mode)

    async def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Perform a GET request and return the decoded body.

        Args:
            url: Relative or absolute URL of the request.
            params: Query parameters; list values become ``key[]=v`` pairs.
            headers: Per-call headers, overriding defaults.

        Raises:
            StatusError: If the status is outside [200, 310).
            DecodeError: If the Content-Type is missing or unknown.
        """
        full_url = resolve_url(url, self._config.base_url)
        return await self._send(
            "GET", full_url, headers, request_url=full_url + encode_query(params or {})
        )

    async def post(
        self,
        url: str,
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Perform a POST request and return the decoded body.

        ``payload`` defaults to an empty JSON object. Bytes, str,
        UrlSearchParams and FormData are sent as-is; other values as JSON.
        """
        body = encode_body({} if payload is None else payload)
        full_url = resolve_url(url, self._config.base_url)
        return await self._send("POST", full_url, headers, body=body)

    async def put(
        self,
        url: str,
        payload: Any,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Perform a PUT request and return the decoded body."""
        body = encode_body(payload)
        full_url = resolve_url(url, self._config.base_url)
        return await self._send("PUT", full_url, headers, body=body)

    async def delete(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Perform a DELETE request. The response body is never decoded.

        Raises:
            StatusError: If the status is outside [200, 310).
        """
        full_url = resolve_url(url, self._config.base_url)
        await self._send("DELETE", full_url, headers, decode=False)

    def _merge_headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        return {**self._config.default_headers, **(headers or {})}

    async def _send(
        self,
        method: str,
        full_url: str,
        headers: Mapping[str, str] | None,
        body: Any = None,
        request_url: str | None = None,
        decode: bool = True,
    ) -> Any:
        """Run one request through transport, validation and decoding.

        Args:
            method: HTTP method.
            full_url: Resolved URL, used in error context (no query string).
            headers: Per-call headers.
            body: Encoded body, or None.
            request_url: URL actually requested, if it differs from full_url.
            decode: Whether to decode the body after validation.
        """
        options = RequestOptions(
            method=method,
            headers=self._merge_headers(headers),
            body=body,
            mode=self._config.mode,
        )
        target = request_url or full_url
        self._logger.debug("%s %s", method, target)

        response: httpx.Response = await self._transport(target, options)
        try:
            await validate_status(response, full_url, method)
            if not decode:
                return None
            return await decode_response(response, full_url, method, log=self._logger)
        finally:
            await response.aclose()
