"""
=============================================================================
REQUEST ADAPTER
=============================================================================

Prepares each raw request/response pair and runs the user handler on it.

    raw request + response
            │
            ▼
    ┌──────────────────────────────────────────────────────────────────┐
    │ 1. pop x-now-bridge-request-id      (never visible to handlers)  │
    │ 2. bridge.consume_event(id)         missing/unknown id → 500     │
    │ 3. install lazy cookies/query/body                               │
    │ 4. attach res.status/send/json                                   │
    │ 5. await listener(req, res)                                      │
    └──────────────────────────────────────────────────────────────────┘
            │
            ├── ApiError raised ────► status line only: "400 Invalid JSON"
            │
            └── anything else ──────► logged, then re-raised to the caller

=============================================================================
"""

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from .access_log import AccessLog
from .bridge import REQUEST_ID_HEADER, Bridge
from .errors import ApiError, EventNotFoundError
from .http.request import NowRequest
from .http.response import NowResponse, send_error
from .http.status_codes import HTTPStatus

logger = logging.getLogger(__name__)

Listener = Callable[[NowRequest, NowResponse], Union[None, Awaitable[None]]]


class RequestAdapter:
    """
    Wires one request at a time into the user's handler.

    Args:
        listener: handler(request, response), plain function or coroutine
                  function.
        bridge: Source of the request bodies.
        access_log: Optional AccessLog fed after every request.
    """

    def __init__(self, listener: Listener, bridge: Bridge, access_log: Optional[AccessLog] = None):
        self.listener = listener
        self.bridge = bridge
        self.access_log = access_log

    async def handle(self, request: NowRequest, response: NowResponse) -> None:
        """
        Run the handler for one request.

        ApiError (from the handler or from a lazy parser) is answered with
        its status code and message. Every other exception propagates.
        """
        start_time = time.time()
        request_id = request.headers.pop(REQUEST_ID_HEADER, None)

        try:
            await self._dispatch(request, response, request_id)
        except ApiError as e:
            logger.warning(
                f"[{request_id}] {request.method} {request.url} "
                f"-> {e.status_code} {e.message}"
            )
            if response.ended:
                logger.warning(f"[{request_id}] Response already ended, error not sent")
            else:
                send_error(response, e.status_code, e.message)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] Handler failed: {request.method} {request.url} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)",
                exc_info=True,
            )
            raise

        if self.access_log is not None:
            duration_ms = (time.time() - start_time) * 1000
            self.access_log.record(str(request_id), request, response, duration_ms)

    async def _dispatch(self, request: NowRequest, response: NowResponse, request_id: Any) -> None:
        if not isinstance(request_id, str) or not request_id:
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

        try:
            event = self.bridge.consume_event(request_id)
        except EventNotFoundError:
            logger.error(f"[{request_id}] No bridge event for request")
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error") from None

        request.install_parsers(event.body)
        response.attach_helpers(request)
        logger.debug(f"[{request_id}] Helpers installed, calling handler")

        result = self.listener(request, response)
        if inspect.isawaitable(result):
            await result
