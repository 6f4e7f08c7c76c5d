import pytest

from guardmw.http import ResponseWriter, new_request
from guardmw.https import HTTPSConfig, enforce_https


def _ok(writer, request):
    writer.write_header(200)


def _serve(enabled, request):
    writer = ResponseWriter()
    enforce_https(HTTPSConfig(enabled=enabled))(_ok)(writer, request)
    return writer


def test_allows_http_when_disabled():
    assert _serve(False, new_request("GET", "http://example.com/test")).status == 200


def test_allows_https_with_tls():
    request = new_request("GET", "https://example.com/test")
    request.tls = True
    assert _serve(True, request).status == 200


def test_allows_forwarded_proto_https():
    request = new_request(
        "GET", "http://example.com/test", headers={"X-Forwarded-Proto": "https"}
    )
    assert _serve(True, request).status == 200


@pytest.mark.parametrize(
    "url, location",
    [
        ("http://example.com/test", "https://example.com/test"),
        ("http://example.com/test?foo=bar&baz=qux", "https://example.com/test?foo=bar&baz=qux"),
        ("http://example.com/api/v1/users/123", "https://example.com/api/v1/users/123"),
        ("http://example.com/", "https://example.com/"),
    ],
)
def test_redirects_http_to_https(url, location):
    writer = _serve(True, new_request("GET", url))
    assert writer.status == 301
    assert writer.headers.get("Location") == location


def test_handles_missing_host():
    request = new_request("GET", "/test")
    request.host = "example.com"
    writer = _serve(True, request)
    assert writer.status == 301
    assert writer.headers.get("Location") == "https://example.com/test"