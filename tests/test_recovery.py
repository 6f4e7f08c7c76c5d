import json

import pytest

from guardmw.http import ResponseWriter, new_request
from guardmw.recovery import recovery
from guardmw.request_id import request_id
from guardmw.security_headers import security_headers


def _raise(exc):
    def handler(writer, request):
        raise exc

    return handler


def test_recovers_and_returns_500():
    writer = ResponseWriter()
    recovery(_raise(RuntimeError("something went wrong")))(writer, new_request("GET", "/test"))
    assert writer.status == 500
    assert writer.headers.get("Content-Type") == "application/json"
    response = json.loads(writer.text)
    assert response["error"] == "Internal server error"
    assert response["code"] == "INTERNAL_SERVER_ERROR"
    assert response["request_id"] == ""


def test_keeps_request_id_from_context():
    request = new_request("GET", "/test").with_context(request_id="test-request-123")
    writer = ResponseWriter()
    recovery(_raise(RuntimeError("test panic")))(writer, request)
    assert json.loads(writer.text)["request_id"] == "test-request-123"


def test_does_not_interfere_with_success():
    def final(writer, request):
        writer.headers.set("Content-Type", "application/json")
        writer.write_header(201)
        writer.write('{"status":"success"}')

    writer = ResponseWriter()
    recovery(final)(writer, new_request("POST", "/test"))
    assert writer.status == 201
    assert writer.text == '{"status":"success"}'


@pytest.mark.parametrize(
    "exc",
    [RuntimeError("error message"), ValueError("assert.AnError"), KeyError(42), TypeError()],
)
def test_recovers_from_different_exception_types(exc):
    writer = ResponseWriter()
    recovery(_raise(exc))(writer, new_request("GET", "/test"))
    assert writer.status == 500
    response = json.loads(writer.text)
    assert response["code"] == "INTERNAL_SERVER_ERROR"


@pytest.mark.parametrize("method", ["GET", "POST", "PUT", "PATCH", "DELETE"])
def test_recovers_for_every_method(method):
    writer = ResponseWriter()
    recovery(_raise(RuntimeError("test panic")))(writer, new_request(method, "/test"))
    assert writer.status == 500


@pytest.mark.parametrize("path", ["/", "/api/v1/users", "/api/v1/configs", "/health"])
def test_recovers_for_every_path(path):
    writer = ResponseWriter()
    recovery(_raise(RuntimeError("test panic")))(writer, new_request("GET", path))
    assert writer.status == 500


def test_error_message_hides_details():
    writer = ResponseWriter()
    recovery(_raise(RuntimeError("internal database connection failed")))(
        writer, new_request("GET", "/test")
    )
    response = json.loads(writer.text)
    assert response["error"] == "Internal server error"
    assert set(response) == {"error", "code", "request_id"}


def test_works_with_request_id_middleware():
    writer = ResponseWriter()
    request_id(recovery(_raise(RuntimeError("test panic"))))(writer, new_request("GET", "/test"))
    assert writer.status == 500
    assert len(json.loads(writer.text)["request_id"]) == 36


def test_works_with_security_headers():
    writer = ResponseWriter()
    security_headers(recovery(_raise(RuntimeError("test panic"))))(
        writer, new_request("GET", "/test")
    )
    assert writer.status == 500
    assert writer.headers.get("X-Content-Type-Options") == "nosniff"


def test_status_unchanged_after_partial_write():
    def final(writer, request):
        writer.write_header(200)
        writer.write("partial response")
        raise RuntimeError("panic after write")

    writer = ResponseWriter()
    recovery(final)(writer, new_request("GET", "/test"))
    assert writer.status == 200
    assert writer.text.startswith("partial response")


def _none_attribute(writer, request):
    value = None
    value.upper()


def _index_error(writer, request):
    [1, 2, 3][10]


def _zero_division(writer, request):
    x, y = 10, 0
    x / y


def _bad_cast(writer, request):
    int("string")


@pytest.mark.parametrize("final", [_none_attribute, _index_error, _zero_division, _bad_cast])
def test_real_world_failures(final):
    writer = ResponseWriter()
    recovery(final)(writer, new_request("GET", "/test"))
    assert writer.status == 500