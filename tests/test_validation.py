import json

import pytest

from guardmw.http import ResponseWriter, new_request
from guardmw.validation import (
    MAX_REQUEST_SIZE,
    bad_request,
    content_type_validation,
    method_validation,
    request_size_limit,
)

MAX_SIZE = 1024


def _ok(writer, request):
    writer.write_header(200)


def _read_body(body_size):
    outcome = {}

    def final(writer, request):
        try:
            outcome["data"] = request.body.read(MAX_SIZE + 100)
        except ValueError as exc:
            outcome["error"] = str(exc)
        writer.write_header(200)

    writer = ResponseWriter()
    request = new_request("POST", "/test", b"a" * body_size, {"Content-Type": "application/json"})
    request_size_limit(MAX_SIZE)(final)(writer, request)
    return writer, outcome


@pytest.mark.parametrize("body_size", [500, MAX_SIZE])
def test_size_limit_allows_bodies_within_limit(body_size):
    writer, outcome = _read_body(body_size)
    assert writer.status == 200
    assert outcome["data"] == b"a" * body_size


def test_size_limit_rejects_body_over_limit():
    writer, outcome = _read_body(MAX_SIZE + 1)
    assert writer.status == 200
    assert "too large" in outcome["error"]


def test_size_limit_read_all_over_limit_raises():
    def final(writer, request):
        with pytest.raises(ValueError, match="too large"):
            request.body.read()
        writer.write_header(200)

    writer = ResponseWriter()
    request_size_limit(4)(final)(writer, new_request("POST", "/test", b"abcdef"))
    assert writer.status == 200


def test_default_max_request_size_rejects_larger_body():
    outcome = {}

    def final(writer, request):
        try:
            request.body.read()
        except ValueError as exc:
            outcome["error"] = str(exc)
        writer.write_header(200)

    writer = ResponseWriter()
    request = new_request("POST", "/test", b"a" * (10 * 1024 * 1024 + 1))
    request_size_limit(MAX_REQUEST_SIZE)(final)(writer, request)
    assert writer.status == 200
    assert "too large" in outcome["error"]


@pytest.mark.parametrize(
    "method, content_type, length, expected",
    [
        ("POST", "application/json", 100, 200),
        ("POST", "", 100, 400),
        ("POST", "text/plain", 100, 400),
        ("GET", "", 0, 200),
        ("POST", "", 0, 200),
    ],
)
def test_content_type_validation(method, content_type, length, expected):
    headers = {"Content-Type": content_type} if content_type else None
    writer = ResponseWriter()
    content_type_validation(_ok)(writer, new_request(method, "/test", b"a" * length, headers))
    assert writer.status == expected


def test_content_type_messages():
    writer = ResponseWriter()
    request = new_request("PUT", "/test", b"a" * 10, {"Content-Type": "text/plain"})
    content_type_validation(_ok)(writer, request)
    assert (
        json.loads(writer.text)["error"]
        == "Invalid Content-Type: text/plain (expected application/json)"
    )
    missing = ResponseWriter()
    content_type_validation(_ok)(missing, new_request("PATCH", "/test", b"a" * 10))
    assert json.loads(missing.text)["error"] == "Content-Type header is required"


@pytest.mark.parametrize(
    "method, expected", [("GET", 200), ("POST", 200), ("PUT", 400), ("DELETE", 400)]
)
def test_method_validation(method, expected):
    writer = ResponseWriter()
    method_validation(["GET", "POST"])(_ok)(writer, new_request(method, "/test"))
    assert writer.status == expected
    if expected != 200:
        assert writer.headers.get("Allow") == "GET, POST"
        assert json.loads(writer.text)["error"] == f"Method {method} not allowed"


def test_bad_request_writes_json_error():
    writer = ResponseWriter()
    bad_request(writer, "broken")
    assert writer.status == 400
    assert writer.headers.get("Content-Type") == "application/json"
    assert json.loads(writer.text)["error"] == "broken"