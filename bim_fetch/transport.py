"""Transport boundary - the injected function that performs the network call.

A transport is any coroutine function ``(url, options) -> httpx.Response``.
The response it returns must have an unread body: status validation and
decoding read it at most once, and the client closes it afterwards.

HttpxTransport is the default implementation. It does not retry, time out
on its own behalf, or translate httpx errors.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx

from bim_fetch.models import FormData, RequestOptions, UrlSearchParams

Transport = Callable[[str, RequestOptions], Awaitable[httpx.Response]]


class HttpxTransport:
    """Sends requests through an ``httpx.AsyncClient``.

    Usage:
        transport = HttpxTransport()
        try:
            response = await transport(url, options)
        finally:
            await transport.aclose()

    Or with an async context manager:
        async with HttpxTransport() as transport:
            response = await transport(url, options)

    A client passed in by the caller is not closed by aclose().
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __call__(self, url: str, options: RequestOptions) -> httpx.Response:
        """Send one request and return the response with its body unread.

        ``options.mode`` has no httpx equivalent and is ignored.
        """
        headers = dict(options.headers)
        body_kwargs = _build_body_kwargs(options.body)
        if "files" in body_kwargs:
            # httpx must generate the multipart Content-Type with its boundary.
            headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}

        request = self._client.build_request(
            options.method,
            url,
            headers=headers,
            **body_kwargs,
        )
        return await self._client.send(request, stream=True)


def _build_body_kwargs(body: Any) -> dict[str, Any]:
    """Map an encoded body to httpx request keyword arguments."""
    if body is None:
        return {}
    if isinstance(body, (bytes, bytearray, memoryview)):
        return {"content": bytes(body)}
    if isinstance(body, str):
        return {"content": body.encode("utf-8")}
    if isinstance(body, UrlSearchParams):
        return {"content": str(body).encode("ascii")}
    if isinstance(body, FormData):
        # Plain fields go in as (None, bytes) parts so the body is multipart
        # even when the form has no files.
        files: list[tuple[str, Any]] = []
        for name, value in body:
            if isinstance(value, str):
                files.append((name, (None, value.encode("utf-8"))))
            else:
                files.append((name, (value.filename, value.content, value.content_type)))
        return {"files": files}
    raise TypeError(f"Unsupported request body type: {type(body).__name__}")
