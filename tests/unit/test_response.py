"""
Unit tests for NowResponse and the send pipeline.
"""

import json

import pytest

from nowhelpers.errors import ResponseEndedError
from nowhelpers.http.body import parse_json
from nowhelpers.http.etag import EMPTY_ENTITY_TAG, create_etag
from nowhelpers.http.response import (
    BytesBody,
    EmptyBody,
    NowResponse,
    StructuredBody,
    TextBody,
    classify_body,
    send_error,
    utf8_byte_length,
)


class TestNowResponse:
    """Tests for the response model itself."""

    def test_defaults(self):
        """Test a fresh response."""
        response = NowResponse()

        assert response.status_code == 200
        assert response.status_message == "OK"
        assert response.headers == {}
        assert response.body == b""
        assert response.ended is False

    def test_status_message_follows_code(self):
        """Test the reason phrase fallback."""
        response = NowResponse(status_code=404)
        assert response.status_message == "Not Found"

        response.status_code = 299
        assert response.status_message == "Unknown"

    def test_headers_case_insensitive(self):
        """Test that header names are stored lowercase."""
        response = NowResponse()
        response.set_header("X-Custom", "1")

        assert response.get_header("x-custom") == "1"
        assert response.has_header("X-CUSTOM")

        response.remove_header("X-Custom")
        assert not response.has_header("x-custom")

    def test_end_twice(self):
        """Test writing after end."""
        response = NowResponse()
        response.end("done")

        assert response.body == b"done"
        with pytest.raises(ResponseEndedError):
            response.end()

    def test_helpers_need_binding(self):
        """Test helpers on a response the adapter never saw."""
        with pytest.raises(RuntimeError):
            NowResponse().send("x")
        with pytest.raises(RuntimeError):
            NowResponse().status(201)

    def test_send_error(self):
        """Test the status-line-only error response."""
        response = NowResponse()
        send_error(response, 400, "Invalid JSON")

        assert response.status_code == 400
        assert response.status_message == "Invalid JSON"
        assert response.headers == {}
        assert response.body == b""
        assert response.ended


class TestClassifyBody:
    """Tests for body classification."""

    def test_variants(self):
        """Test each accepted value kind."""
        assert classify_body(None) == EmptyBody()
        assert classify_body("x") == TextBody("x")
        assert classify_body(bytearray(b"x")) == BytesBody(b"x")
        assert classify_body({"a": 1}) == StructuredBody({"a": 1})
        assert classify_body(False) == StructuredBody(False)
        assert classify_body(1.5) == StructuredBody(1.5)

    @pytest.mark.parametrize("value", [object(), {1, 2}, len])
    def test_unsupported(self, value):
        """Test values that cannot be sent."""
        with pytest.raises(TypeError):
            classify_body(value)

    def test_utf8_byte_length(self):
        """Test byte counting across code point ranges."""
        assert utf8_byte_length("") == 0
        assert utf8_byte_length("abc") == 3
        assert utf8_byte_length("aé€\U0001f600") == 1 + 2 + 3 + 4


class TestSend:
    """Tests for res.send()."""

    def test_text(self, bound_pair):
        """Test a short string body."""
        _, res = bound_pair()
        res.send("hello")

        assert res.ended
        assert res.body == b"hello"
        assert res.get_header("content-type") == "text/html; charset=utf-8"
        assert res.get_header("content-length") == "5"
        assert res.get_header("etag") == create_etag(b"hello")

    def test_bytes(self, bound_pair):
        """Test a binary body."""
        _, res = bound_pair()
        res.send(b"\x00\x01")

        assert res.body == b"\x00\x01"
        assert res.get_header("content-type") == "application/octet-stream"
        assert res.get_header("content-length") == "2"

    def test_bytes_keep_content_type(self, bound_pair):
        """Test that a binary body gets no charset."""
        _, res = bound_pair()
        res.set_header("Content-Type", "image/png")
        res.send(b"\x89PNG")

        assert res.get_header("content-type") == "image/png"

    def test_none_is_empty_text(self, bound_pair):
        """Test send(None)."""
        _, res = bound_pair()
        res.send(None)

        assert res.body == b""
        assert res.get_header("content-length") == "0"
        assert res.get_header("content-type") == "text/html; charset=utf-8"
        assert res.get_header("etag") == "W/" + EMPTY_ENTITY_TAG

    @pytest.mark.parametrize(
        "value,expected",
        [
            ({"a": 1}, b'{"a":1}'),
            ([1, "x"], b'[1,"x"]'),
            (True, b"true"),
            (42, b"42"),
        ],
    )
    def test_structured_goes_to_json(self, bound_pair, value, expected):
        """Test that objects, arrays, booleans and numbers are JSON."""
        _, res = bound_pair()
        res.send(value)

        assert res.body == expected
        assert res.get_header("content-type") == "application/json; charset=utf-8"

    def test_charset_added_to_existing_type(self, bound_pair):
        """Test that a text body forces charset=utf-8."""
        _, res = bound_pair()
        res.set_header("content-type", "text/plain; charset=latin1; format=flowed")
        res.send("x")

        assert res.get_header("content-type") == "text/plain; charset=utf-8; format=flowed"

    def test_multibyte_short_length(self, bound_pair):
        """Test Content-Length of short non-ASCII text."""
        _, res = bound_pair()
        res.send("héllo")

        assert res.get_header("content-length") == "6"
        assert res.body == "héllo".encode("utf-8")

    @pytest.mark.parametrize("count", [999, 1000, 1500])
    def test_multibyte_around_threshold(self, bound_pair, count):
        """Test that short and long text report the same byte length."""
        text = "é" * count
        _, res = bound_pair()
        res.send(text)

        assert res.get_header("content-length") == str(2 * count)
        assert res.body == text.encode("utf-8")
        assert res.get_header("etag") == create_etag(text)

    def test_etag_kept_if_set(self, bound_pair):
        """Test that a handler's ETag is not replaced."""
        _, res = bound_pair()
        res.set_header("ETag", '"custom"')
        res.send("hello")

        assert res.get_header("etag") == '"custom"'

    def test_etag_depends_on_content(self, bound_pair):
        """Test ETag stability."""
        _, first = bound_pair()
        _, second = bound_pair()
        _, third = bound_pair()
        first.send("same")
        second.send("same")
        third.send("different")

        assert first.get_header("etag") == second.get_header("etag")
        assert first.get_header("etag") != third.get_header("etag")
        assert first.get_header("etag").startswith('W/"4-')

    @pytest.mark.parametrize("code", [204, 304])
    def test_bodyless_status(self, bound_pair, code):
        """Test that 204/304 drop the body and entity headers."""
        _, res = bound_pair()
        res.set_header("transfer-encoding", "chunked")
        res.status(code).send("hello")

        assert res.body == b""
        assert not res.has_header("content-type")
        assert not res.has_header("content-length")
        assert not res.has_header("transfer-encoding")
        assert res.has_header("etag")

    def test_head_has_headers_but_no_body(self, bound_pair):
        """Test a HEAD request."""
        _, res = bound_pair(method="HEAD")
        res.send("hello")

        assert res.ended
        assert res.body == b""
        assert res.get_header("content-length") == "5"

    def test_unsupported_body(self, bound_pair):
        """Test that a bad body fails before anything is written."""
        _, res = bound_pair()

        with pytest.raises(TypeError):
            res.send(object())
        assert not res.ended
        assert res.headers == {}

    def test_send_after_end(self, bound_pair):
        """Test sending twice."""
        _, res = bound_pair()
        res.send("one")

        with pytest.raises(ResponseEndedError):
            res.send("two")
        assert res.body == b"one"


class TestJsonAndStatus:
    """Tests for res.json() and res.status()."""

    def test_status_chains(self, bound_pair):
        """Test res.status(201).json(...)."""
        _, res = bound_pair()
        returned = res.status(201)

        assert returned is res
        assert res.status_code == 201

    def test_json_compact_and_unicode(self, bound_pair):
        """Test serialization details."""
        _, res = bound_pair()
        res.json({"é": "ü", "n": [1, 2]})

        assert res.body == '{"é":"ü","n":[1,2]}'.encode("utf-8")
        assert res.get_header("content-length") == str(len(res.body))

    def test_json_keeps_custom_type(self, bound_pair):
        """Test that an existing Content-Type gets a charset only."""
        _, res = bound_pair()
        res.set_header("content-type", "application/vnd.api+json")
        res.json({})

        assert res.get_header("content-type") == "application/vnd.api+json; charset=utf-8"
        assert res.body == b"{}"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ({"x": float("nan")}, b'{"x":null}'),
            ([float("inf"), -float("inf"), 1.5], b"[null,null,1.5]"),
            ({"deep": [{"v": float("nan")}]}, b'{"deep":[{"v":null}]}'),
            (float("nan"), b"null"),
        ],
    )
    def test_json_non_finite_is_null(self, bound_pair, value, expected):
        """Test that NaN and infinities are written as null."""
        _, res = bound_pair()
        res.json(value)

        assert res.body == expected
        assert parse_json(res.body) == json.loads(expected)

    def test_json_string_is_quoted(self, bound_pair):
        """Test that json("x") sends a JSON string, unlike send("x")."""
        _, res = bound_pair()
        res.json("x")

        assert res.body == b'"x"'


class TestEtag:
    """Tests for create_etag()."""

    def test_empty(self):
        """Test the constant tag for an empty body."""
        assert create_etag(b"") == 'W/"0-2jmj7l5rSw0yVb/vlWAYkK/YBwk"'

    def test_strong(self):
        """Test a known digest without the weak prefix."""
        assert create_etag("hello", weak=False) == '"5-qvTGHdzF6KLavt4PO0gs2a6pQ00"'

    def test_text_and_bytes_agree(self):
        """Test that text is tagged by its UTF-8 bytes."""
        assert create_etag("été") == create_etag("été".encode("utf-8"))
