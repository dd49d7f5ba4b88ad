"""
=============================================================================
BRIDGE: INVOKE PAYLOADS ↔ HTTP REQUESTS
=============================================================================

The bridge turns function-invocation payloads into ordinary HTTP requests
against the local helper server, and hands each request its body through
a single-use event store.

    invoke payload                     helper server
    ──────────────                     ─────────────
    {"Action": "Invoke",
     "body": "{method, path,
       headers, encoding, body}"}
            │
            ▼
    normalize_event() ─► BridgeEvent
            │
            ▼
    register_event() ─► request id "0"
            │
            ▼
    launch() ── POST /path ──────────► RequestAdapter.handle()
               x-now-bridge-request-id: 0        │
                                                 ▼
                                     consume_event("0") ─► body bytes
                                     (the id is now gone)
            ◄── status, headers, body ───────────┘
            │
            ▼
    {"statusCode": 200, "headers": {...},
     "encoding": "base64", "body": "..."}

=============================================================================
SINGLE-USE EVENTS
=============================================================================

consume_event() removes the event it returns. A second consume of the same
id, or a consume of an id that was never registered, raises
EventNotFoundError; the adapter reports both as 500. The store is the only
state shared between requests, so it is guarded by a lock.

=============================================================================
"""

import base64
import http.client
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import EventNotFoundError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-now-bridge-request-id"


@dataclass
class BridgeEvent:
    """One pending request: where it goes and the body it carries."""

    method: str = "GET"
    path: str = "/"
    headers: Dict[str, Union[str, List[str]]] = field(default_factory=dict)
    body: bytes = b""


class Bridge:
    """
    Keyed, single-use event store plus the launcher that feeds it.

    Usage:
        bridge = Bridge()
        server = create_server_with_helpers(handler, bridge)
        ...
        result = bridge.launch({"Action": "Invoke", "body": "..."})
    """

    def __init__(self, server_address: Optional[Tuple[str, int]] = None):
        self.server_address = server_address
        self._events: Dict[str, BridgeEvent] = {}
        self._seed = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    # =========================================================================
    # EVENT STORE
    # =========================================================================

    def register_event(self, event: BridgeEvent) -> str:
        """Store `event` and return the id that will retrieve it once."""
        with self._lock:
            request_id = str(self._seed)
            self._seed += 1
            self._events[request_id] = event
        logger.debug(f"Registered event {request_id}: {event.method} {event.path}")
        return request_id

    def consume_event(self, request_id: str) -> BridgeEvent:
        """
        Remove and return the event for `request_id`.

        Raises:
            EventNotFoundError: Unknown id, or already consumed.
        """
        with self._lock:
            event = self._events.pop(request_id, None)
        if event is None:
            raise EventNotFoundError(request_id)
        logger.debug(f"Consumed event {request_id}")
        return event

    # =========================================================================
    # PAYLOAD NORMALIZATION
    # =========================================================================

    @staticmethod
    def normalize_event(payload: Dict[str, Any]) -> BridgeEvent:
        """
        Build a BridgeEvent from an invoke payload.

        Accepts the wrapped form {"Action": "Invoke", "body": "<json>"}
        or the inner object directly. A body with "encoding": "base64" is
        decoded; any other body is taken as UTF-8 text.

        Raises:
            ValueError: If the payload is not a well-formed invocation.
        """
        if not isinstance(payload, dict):
            raise ValueError("invoke payload must be an object")

        if payload.get("Action") == "Invoke":
            try:
                payload = json.loads(payload.get("body") or "{}")
            except json.JSONDecodeError as e:
                raise ValueError(f"invalid invoke body: {e}") from e
            if not isinstance(payload, dict):
                raise ValueError("invoke body must be an object")

        headers = {
            str(name).lower(): value
            for name, value in (payload.get("headers") or {}).items()
        }

        raw_body = payload.get("body") or ""
        if payload.get("encoding") == "base64":
            try:
                body = base64.b64decode(raw_body, validate=True)
            except ValueError as e:
                raise ValueError(f"invalid base64 body: {e}") from e
        elif isinstance(raw_body, bytes):
            body = raw_body
        else:
            body = str(raw_body).encode("utf-8")

        return BridgeEvent(
            method=str(payload.get("method") or "GET").upper(),
            path=payload.get("path") or "/",
            headers=headers,
            body=body,
        )

    # =========================================================================
    # LAUNCHER
    # =========================================================================

    def launch(self, payload: Dict[str, Any], timeout: float = 30.0) -> Dict[str, Any]:
        """
        Run one invocation through the helper server.

        Returns:
            {"statusCode", "headers", "encoding": "base64", "body"}
        """
        if self.server_address is None:
            raise RuntimeError("bridge is not attached to a listening server")

        event = self.normalize_event(payload)
        request_id = self.register_event(event)

        headers = dict(event.headers)
        headers.pop("transfer-encoding", None)
        headers[REQUEST_ID_HEADER] = request_id
        headers["content-length"] = str(len(event.body))

        host, port = self.server_address
        conn = http.client.HTTPConnection(host, port, timeout=timeout)
        try:
            conn.putrequest(
                event.method,
                event.path,
                skip_host="host" in headers,
                skip_accept_encoding=True,
            )
            for name, value in headers.items():
                for item in (value if isinstance(value, list) else [value]):
                    conn.putheader(name, item)
            conn.endheaders(event.body or None)

            response = conn.getresponse()
            body = response.read()

            result_headers: Dict[str, Union[str, List[str]]] = {}
            for name, value in response.getheaders():
                name = name.lower()
                if name not in result_headers:
                    result_headers[name] = value
                elif isinstance(result_headers[name], list):
                    result_headers[name].append(value)
                else:
                    result_headers[name] = [result_headers[name], value]
        finally:
            conn.close()
            # the server never saw it (connection refused, etc.)
            with self._lock:
                self._events.pop(request_id, None)

        logger.debug(f"Launched event {request_id}: {response.status}")
        return {
            "statusCode": response.status,
            "headers": result_headers,
            "encoding": "base64",
            "body": base64.b64encode(body).decode("ascii"),
        }
