"""
=============================================================================
HELPER SERVER
=============================================================================

A small threaded HTTP server that puts the RequestAdapter behind a real
socket, so the bridge can forward invocations to it.

=============================================================================
REQUEST FLOW
=============================================================================

    bridge.launch()
         │  POST /api HTTP/1.1
         │  x-now-bridge-request-id: 7
         ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │  HelperRequestHandler (one thread per connection)                 │
    │                                                                   │
    │  1. drain the socket body (the real body comes from the bridge)   │
    │  2. build NowRequest / NowResponse                                │
    │  3. asyncio.run(adapter.handle(request, response))                │
    │  4. write status line, headers and body                           │
    └───────────────────────────────────────────────────────────────────┘

Errors other than ApiError escape step 3; the connection is dropped and the
traceback is logged, the same way http.server treats any handler crash.

Connection handling, threading and HTTP/1.x framing are all
http.server's; nothing here reimplements them.

=============================================================================
"""

import asyncio
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Optional, Tuple, Union

from .access_log import AccessLog
from .adapter import Listener, RequestAdapter
from .bridge import Bridge
from .config import HelperConfig
from .http.request import NowRequest
from .http.response import NowResponse, send_error
from .http.status_codes import HTTPStatus

logger = logging.getLogger(__name__)


def collect_headers(message) -> Dict[str, Union[str, List[str]]]:
    """Lowercase header names; repeated headers become lists."""
    headers: Dict[str, Union[str, List[str]]] = {}
    for name, value in message.items():
        name = name.lower()
        if name not in headers:
            headers[name] = value
        elif isinstance(headers[name], list):
            headers[name].append(value)
        else:
            headers[name] = [headers[name], value]
    return headers


def _single_line(text: str) -> str:
    return text.replace("\r", " ").replace("\n", " ")


def _content_length(value: Optional[str]) -> Optional[int]:
    """Declared body length; 0 when absent, None when malformed."""
    if not value:
        return 0
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


class HelperRequestHandler(BaseHTTPRequestHandler):
    """Feeds every request, whatever its method, through the adapter."""

    server: "HelperServer"

    def version_string(self) -> str:
        return self.server.config.server_name

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")

    def _dispatch(self):
        request = NowRequest(
            method=self.command,
            url=self.path,
            headers=collect_headers(self.headers),
            http_version=self.request_version,
        )
        response = NowResponse()

        length = _content_length(self.headers.get("content-length"))
        if length is None:
            logger.warning(f"Bad Content-Length from {self.address_string()}: {self.command} {self.path}")
            self.close_connection = True
            send_error(response, int(HTTPStatus.BAD_REQUEST), "Invalid Content-Length")
            self._write_response(request, response)
            return
        if length > 0:
            self.rfile.read(length)

        asyncio.run(self.server.adapter.handle(request, response))

        self._write_response(request, response)

    def _write_response(self, request: NowRequest, response: NowResponse):
        self.send_response(response.status_code, _single_line(response.status_message))

        for name, value in response.headers.items():
            for item in (value if isinstance(value, list) else [value]):
                self.send_header(name, _single_line(str(item)))

        status_allows_body = response.status_code >= 200 and response.status_code not in (
            HTTPStatus.NO_CONTENT,
            HTTPStatus.NOT_MODIFIED,
        )
        if status_allows_body and not response.has_header("content-length"):
            self.send_header("content-length", str(len(response.body)))
        self.end_headers()

        if request.method != "HEAD" and response.body:
            self.wfile.write(response.body)

    do_GET = _dispatch
    do_HEAD = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
    do_OPTIONS = _dispatch


class HelperServer(ThreadingHTTPServer):
    """
    ThreadingHTTPServer running a RequestAdapter.

    Binds on construction and tells the bridge where it listens, so
    bridge.launch() can reach it straight away.
    """

    daemon_threads = True

    def __init__(self, adapter: RequestAdapter, bridge: Bridge, config: HelperConfig):
        self.adapter = adapter
        self.bridge = bridge
        self.config = config
        self._thread: Optional[threading.Thread] = None
        super().__init__((config.host, config.port), HelperRequestHandler)
        bridge.server_address = self.address

    @property
    def address(self) -> Tuple[str, int]:
        host, port = self.server_address[:2]
        return host, port

    def handle_error(self, request, client_address):
        logger.exception(f"Unhandled error while serving {client_address[0]}")

    def start(self) -> "HelperServer":
        """Serve in a background daemon thread."""
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()
        logger.info(f"Helper server listening on {self.address[0]}:{self.address[1]}")
        return self

    def stop(self, timeout: float = 5.0) -> None:
        """Stop serving and release the socket."""
        if self._thread is not None:
            self.shutdown()
            self._thread.join(timeout=timeout)
            self._thread = None
        self.server_close()
        logger.info("Helper server stopped")


def create_server_with_helpers(
    listener: Listener,
    bridge: Bridge,
    config: Optional[HelperConfig] = None,
) -> HelperServer:
    """
    Build a HelperServer whose handler gets lazy cookies/query/body and
    res.status/send/json.

        def handler(req, res):
            res.json({"hello": req.query.get("name", "world")})

        bridge = Bridge()
        server = create_server_with_helpers(handler, bridge).start()
        bridge.launch({"Action": "Invoke", "body": json.dumps({...})})
    """
    config = config or HelperConfig()
    config.validate()

    access_log = AccessLog(log_format=config.log_format) if config.access_log else None
    adapter = RequestAdapter(listener, bridge, access_log=access_log)
    return HelperServer(adapter, bridge, config)
