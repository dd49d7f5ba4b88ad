"""
pytest configuration and fixtures.
"""

import asyncio
from typing import Callable, Generator

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from nowhelpers import Bridge, BridgeEvent, HelperConfig, RequestAdapter, create_server_with_helpers
from nowhelpers.bridge import REQUEST_ID_HEADER
from nowhelpers.http import NowRequest, NowResponse


@pytest.fixture
def bridge() -> Bridge:
    """Empty bridge with no server attached."""
    return Bridge()


@pytest.fixture
def make_request(bridge: Bridge) -> Callable[..., NowRequest]:
    """
    Build a request whose body is registered in the bridge, the way the
    launcher would send it.
    """
    def _make(
        method: str = "GET",
        url: str = "/",
        headers: dict = None,
        body: bytes = b"",
    ) -> NowRequest:
        headers = {k.lower(): v for k, v in (headers or {}).items()}
        request_id = bridge.register_event(
            BridgeEvent(method=method, path=url, headers=dict(headers), body=body)
        )
        headers[REQUEST_ID_HEADER] = request_id
        return NowRequest(method=method, url=url, headers=headers)

    return _make


@pytest.fixture
def run(bridge: Bridge) -> Callable[..., NowResponse]:
    """Run a handler through a RequestAdapter and return the response."""
    def _run(handler, request: NowRequest) -> NowResponse:
        response = NowResponse()
        asyncio.run(RequestAdapter(handler, bridge).handle(request, response))
        return response

    return _run


@pytest.fixture
def bound_pair() -> Callable[..., tuple]:
    """Request/response pair with helpers bound, bypassing the adapter."""
    def _pair(method: str = "GET", url: str = "/") -> tuple:
        request = NowRequest(method=method, url=url)
        request.install_parsers(b"")
        response = NowResponse()
        response.attach_helpers(request)
        return request, response

    return _pair


class TestServer:
    """Helper server running in a background thread."""

    def __init__(self, handler, config: HelperConfig = None):
        self.bridge = Bridge()
        self.server = create_server_with_helpers(
            handler,
            self.bridge,
            config or HelperConfig(log_level="WARNING", access_log=False),
        )

    def start(self):
        self.server.start()

    def stop(self):
        self.server.stop()


@pytest.fixture
def test_server() -> Generator[Callable[..., TestServer], None, None]:
    """Factory starting helper servers; all are stopped after the test."""
    servers = []

    def _start(handler, config: HelperConfig = None) -> TestServer:
        srv = TestServer(handler, config)
        srv.start()
        servers.append(srv)
        return srv

    yield _start

    for srv in servers:
        srv.stop()
