"""Tests for the HTTP client adapter using httpx.MockTransport."""

from urllib.parse import parse_qs

import httpx
import pytest

from errors import MalformedResponseError, TransportError
from http_client import HttpClient


def test_post_sends_form_encoded_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["form"] = parse_qs(request.content.decode())
        seen["accept"] = request.headers.get("Accept")
        return httpx.Response(200, json={"status": "pending"})

    client = HttpClient(transport=httpx.MockTransport(handler))
    result = client.post(
        "https://admin.example.com/api/register",
        data={"site_url": "https://site.example.com", "plugins": '["a.php"]'},
        timeout=15,
        headers={"Accept": "application/json"},
    )

    assert seen["method"] == "POST"
    assert seen["form"] == {"site_url": ["https://site.example.com"], "plugins": ['["a.php"]']}
    assert seen["accept"] == "application/json"
    assert result.status_code == 200
    assert result.ok
    assert result.json() == {"status": "pending"}


def test_get_returns_non_200_without_raising() -> None:
    client = HttpClient(transport=httpx.MockTransport(lambda request: httpx.Response(403, text="rate limited")))

    result = client.get("https://api.github.com/repos/vendor/theme/releases/latest", timeout=15)

    assert result.status_code == 403
    assert not result.ok
    assert result.text == "rate limited"


def test_connection_failure_becomes_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    client = HttpClient(transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.post("https://admin.example.com/api/update", data={}, timeout=15)


def test_timeout_becomes_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = HttpClient(transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.get("https://api.github.com/repos/vendor/theme/releases/latest", timeout=15)


def test_json_on_html_body_is_malformed() -> None:
    client = HttpClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>")))

    result = client.get("https://admin.example.com/api/register", timeout=15)

    with pytest.raises(MalformedResponseError):
        result.json()


def test_invalid_url_becomes_transport_error() -> None:
    client = HttpClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    with pytest.raises(TransportError):
        client.post("https://admin.example.com/api/\x00register", data={}, timeout=15)

    with pytest.raises(TransportError):
        client.get("https://api.github.com/repos/vendor/theme/\x00releases", timeout=15)
