"""
=============================================================================
NOWHELPERS
=============================================================================

Request/response helpers for functions served behind an invocation bridge.

Handlers get a request with lazily parsed `cookies`, `query` and `body`,
and a response with `status()`, `send()` and `json()`:

    import json

    from nowhelpers import ApiError, Bridge, create_server_with_helpers

    async def handler(req, res):
        if "name" not in req.body:
            raise ApiError(422, "name is required")
        res.status(201).json({"hello": req.body["name"]})

    bridge = Bridge()
    server = create_server_with_helpers(handler, bridge).start()

    result = bridge.launch({
        "Action": "Invoke",
        "body": json.dumps({
            "method": "POST",
            "path": "/",
            "headers": {"content-type": "application/json"},
            "body": '{"name": "Ada"}',
        }),
    })
    # result["statusCode"] == 201

=============================================================================
PACKAGE LAYOUT
=============================================================================

    adapter.py     RequestAdapter: per-request wiring, ApiError handling
    bridge.py      Bridge: single-use event store and launcher
    server.py      HelperServer on top of http.server
    access_log.py  one log record per request (text or json)
    config.py      HelperConfig, configure_logging()
    errors.py      ApiError, EventNotFoundError, ResponseEndedError
    http/          parsers, NowRequest, NowResponse, send pipeline

=============================================================================
"""

__version__ = "1.0.0"

from .adapter import RequestAdapter
from .bridge import Bridge, BridgeEvent
from .config import HelperConfig, configure_logging
from .errors import ApiError, EventNotFoundError, ResponseEndedError
from .http import NowRequest, NowResponse
from .server import HelperServer, create_server_with_helpers

__all__ = [
    "ApiError",
    "Bridge",
    "BridgeEvent",
    "EventNotFoundError",
    "HelperConfig",
    "HelperServer",
    "NowRequest",
    "NowResponse",
    "RequestAdapter",
    "ResponseEndedError",
    "configure_logging",
    "create_server_with_helpers",
    "__version__",
]
