"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log record per request handled by the adapter.

=============================================================================
FORMATS
=============================================================================

    text (Apache-like, for humans):

        [18/Oct/2026:10:15:02 +0000] "POST /api/users" 201 27 1.84ms

    json (for log aggregators):

        {"request_id": "3", "method": "POST", "path": "/api/users",
         "query": "", "user_agent": "curl/8.5", "status_code": 201,
         "content_length": 27, "duration_ms": 1.84, "timestamp": "..."}

Records go to the "nowhelpers.access" logger, so they can be routed or
silenced on their own:

    logging.getLogger("nowhelpers.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from .http.request import NowRequest

logger = logging.getLogger("nowhelpers.access")


@dataclass
class RequestLog:
    """Structured log entry for one request."""

    request_id: str
    method: str
    path: str
    query: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "query": self.query,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'[{self.timestamp}] "{self.method} {self.path}" '
            f"{self.status_code} {self.content_length} {self.duration_ms:.2f}ms"
        )


class AccessLog:
    """
    Emits a RequestLog for each finished request.

    Args:
        log_format: "text" or "json".
        log_level: Level the records are logged at (INFO by default).
        skip_paths: Paths never logged (health checks and the like).
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        if log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', not {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def build(self, request_id: str, request: NowRequest, response: Any, duration_ms: float) -> RequestLog:
        _, _, query = (request.url or "/").partition("?")
        user_agent = request.get_header("user-agent") or "-"
        if isinstance(user_agent, list):
            user_agent = ", ".join(user_agent)

        return RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=query,
            user_agent=user_agent,
            status_code=int(response.status_code),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def record(self, request_id: str, request: Any, response: Any, duration_ms: float) -> Optional[RequestLog]:
        """Log one request; returns the entry, or None if it was skipped."""
        entry = self.build(request_id, request, response, duration_ms)
        if entry.path in self.skip_paths:
            return None

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
        return entry
