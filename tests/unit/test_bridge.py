"""
Unit tests for the bridge event store and payload normalization.
"""

import base64
import json
import threading

import pytest

from nowhelpers import Bridge, BridgeEvent, EventNotFoundError


class TestEventStore:
    """Tests for register/consume."""

    def test_register_then_consume(self, bridge):
        """Test retrieving a registered event."""
        event = BridgeEvent(method="POST", path="/x", body=b"data")
        request_id = bridge.register_event(event)

        assert bridge.consume_event(request_id) is event

    def test_consume_is_single_use(self, bridge):
        """Test that an event can be consumed only once."""
        request_id = bridge.register_event(BridgeEvent())
        bridge.consume_event(request_id)

        with pytest.raises(EventNotFoundError) as exc_info:
            bridge.consume_event(request_id)
        assert exc_info.value.request_id == request_id

    def test_unknown_id(self, bridge):
        """Test consuming an id that was never issued."""
        with pytest.raises(EventNotFoundError):
            bridge.consume_event("42")

    def test_ids_are_distinct(self, bridge):
        """Test sequential ids."""
        ids = [bridge.register_event(BridgeEvent()) for _ in range(3)]

        assert ids == ["0", "1", "2"]
        assert len(bridge) == 3

    def test_concurrent_registration(self, bridge):
        """Test that threads never receive the same id."""
        ids = []
        lock = threading.Lock()

        def worker():
            for _ in range(50):
                request_id = bridge.register_event(BridgeEvent())
                with lock:
                    ids.append(request_id)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(ids)) == 200
        assert len(bridge) == 200


class TestNormalizeEvent:
    """Tests for Bridge.normalize_event()."""

    def test_wrapped_base64(self):
        """Test the full invoke payload with a base64 body."""
        inner = {
            "method": "post",
            "path": "/api?x=1",
            "headers": {"Content-Type": "application/json"},
            "encoding": "base64",
            "body": base64.b64encode(b'{"a":1}').decode(),
        }
        event = Bridge.normalize_event({"Action": "Invoke", "body": json.dumps(inner)})

        assert event.method == "POST"
        assert event.path == "/api?x=1"
        assert event.headers == {"content-type": "application/json"}
        assert event.body == b'{"a":1}'

    def test_inner_text_body(self):
        """Test the inner object with a plain text body."""
        event = Bridge.normalize_event({"path": "/t", "body": "héllo"})

        assert event.method == "GET"
        assert event.body == "héllo".encode("utf-8")

    def test_defaults(self):
        """Test an empty payload."""
        event = Bridge.normalize_event({})

        assert event == BridgeEvent(method="GET", path="/", headers={}, body=b"")

    @pytest.mark.parametrize(
        "payload",
        [
            "not a dict",
            {"Action": "Invoke", "body": "{broken"},
            {"Action": "Invoke", "body": "[1, 2]"},
            {"encoding": "base64", "body": "!!!"},
        ],
    )
    def test_invalid(self, payload):
        """Test malformed payloads."""
        with pytest.raises(ValueError):
            Bridge.normalize_event(payload)

    def test_launch_needs_server(self, bridge):
        """Test launching before a server is attached."""
        with pytest.raises(RuntimeError):
            bridge.launch({"path": "/"})
