"""Pytest configuration and fixtures for bim-fetch tests.

This file provides:
- make_response: httpx.Response builder whose body read can be observed
- RecordingTransport: in-process transport that records calls
- PortReservation, MockServer: the integration server subprocess
"""

from __future__ import annotations

import json
import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, AsyncIterator, Generator

import httpx
import pytest

from bim_fetch.models import RequestOptions

# Project root for subprocess cwd
PROJECT_ROOT = Path(__file__).parent.parent
MOCK_SERVER_MODULE = "tests.integration.mock_server"


class TrackingStream(httpx.AsyncByteStream):
    """Async body stream that records whether it was read or closed."""

    def __init__(self, content: bytes) -> None:
        self._content = content
        self.read_count = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        self.read_count += 1
        yield self._content

    async def aclose(self) -> None:
        self.closed = True


def make_response(
    status_code: int = 200,
    content_type: str | None = "application/json",
    content: bytes | None = None,
    json_body: Any = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Create an httpx.Response with an unread, tracked body.

    Prefer this over constructing httpx.Response directly - responses built
    with ``content=`` are read eagerly, which hides double-read bugs.
    The stream is available as ``response.stream``.
    """
    if content is None:
        content = json.dumps(json_body).encode("utf-8") if json_body is not None else b""
    all_headers = dict(headers or {})
    if content_type is not None:
        all_headers["Content-Type"] = content_type
    return httpx.Response(
        status_code,
        headers=all_headers,
        stream=TrackingStream(content),
    )


class RecordingTransport:
    """Transport stub returning queued responses and recording each call."""

    def __init__(self, *responses: httpx.Response) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, RequestOptions]] = []

    async def __call__(self, url: str, options: RequestOptions) -> httpx.Response:
        self.calls.append((url, options))
        if not self._responses:
            raise AssertionError(f"Unexpected request: {options.method} {url}")
        return self._responses.pop(0)

    @property
    def last_url(self) -> str:
        return self.calls[-1][0]

    @property
    def last_options(self) -> RequestOptions:
        return self.calls[-1][1]


class PortReservation:
    """Ephemeral localhost port, held by an open socket until released."""

    def __init__(self) -> None:
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind(("127.0.0.1", 0))
        self.port: int = self._socket.getsockname()[1]

    def release(self) -> int:
        self._socket.close()
        return self.port


def wait_for_server_ready(host: str, port: int, timeout: float = 10.0) -> bool:
    """Poll until ``host:port`` accepts a TCP connection."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((host, port), timeout=1.0):
                return True
        except OSError:
            time.sleep(0.1)
    return False


class MockServer:
    """The integration mock server running under uvicorn in a subprocess."""

    host = "127.0.0.1"

    def __init__(self, reservation: PortReservation) -> None:
        self._reservation = reservation
        self.port = reservation.port
        self.base_url = f"http://{self.host}:{self.port}"
        self._process: subprocess.Popen | None = None

    def __enter__(self) -> MockServer:
        self._reservation.release()
        self._process = subprocess.Popen(
            [sys.executable, "-m", MOCK_SERVER_MODULE, "--host", self.host, "--port", str(self.port)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            cwd=PROJECT_ROOT,
        )
        if not wait_for_server_ready(self.host, self.port):
            self._process.kill()
            _, stderr = self._process.communicate(timeout=5)
            raise RuntimeError(
                f"Mock server did not start on port {self.port}: "
                f"{stderr.decode(errors='replace') or '(no stderr)'}"
            )
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._process.terminate()
        try:
            self._process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()


# =============================================================================
# Pytest Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def mock_server() -> Generator[MockServer, None, None]:
    """Session-scoped mock API server (tests/integration/mock_server.py)."""
    with MockServer(PortReservation()) as server:
        yield server


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Tag tests with unit/integration markers based on their directory.

    Enables running subsets via:
        pytest -m integration  # only integration tests
        pytest -m unit         # only unit tests
    """
    for item in items:
        test_path = Path(item.fspath)
        if "integration" in test_path.parts:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
