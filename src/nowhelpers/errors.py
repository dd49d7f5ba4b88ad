"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Only one kind of error is recovered by the adapter:

    ┌────────────────────┬───────────────────────────────────────────────┐
    │  ApiError          │ Carries a status code. Turned into a bodiless │
    │                    │ response: "HTTP/1.1 400 Invalid JSON".        │
    ├────────────────────┼───────────────────────────────────────────────┤
    │  everything else   │ Propagates to whoever called the adapter.     │
    │                    │ No generic 500 page is rendered here.         │
    └────────────────────┴───────────────────────────────────────────────┘

The distinction is made with isinstance(), never by sniffing for a
status_code attribute on arbitrary exceptions.

=============================================================================
"""


class ApiError(Exception):
    """
    An error that maps directly onto an HTTP status.

    Raise it from a handler (or let a parser raise it) to answer the
    request with `status_code` and `message` as the status line and
    an empty body:

        raise ApiError(404, "Not Found")
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = int(status_code)
        self.message = message

    def __repr__(self) -> str:
        return f"ApiError({self.status_code}, {self.message!r})"


class EventNotFoundError(LookupError):
    """The bridge holds no event for this request id (unknown or consumed)."""

    def __init__(self, request_id: str):
        super().__init__(f"No pending event for request id {request_id!r}")
        self.request_id = request_id


class ResponseEndedError(RuntimeError):
    """A write was attempted after the response was ended."""
