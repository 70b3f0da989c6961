import json

import pytest
import requests

from foxbit_client.client import ExchangeClient
from foxbit_client.errors import (
    ExchangeAuthError,
    ExchangeDecodeError,
    ExchangeHTTPError,
    ExchangeNetworkError,
)
from foxbit_client.request import HttpMethod


class FakeResponse:
    def __init__(self, text="", status_code=200, headers=None):
        self.text = text
        self.status_code = status_code
        self.headers = headers or {}

    def json(self):
        return json.loads(self.text)


def test_get_success_appends_query_verbatim(monkeypatch):
    client = ExchangeClient(base_url="https://example.com/")
    captured = {}

    def fake_get(url, headers=None, timeout=None):
        captured["url"] = url
        captured["timeout"] = timeout
        return FakeResponse(text='{"timestamp":123}')

    monkeypatch.setattr(client.session, "get", fake_get)

    out = client._send(HttpMethod.GET, "/system/time", query="a=1&b=x%20y")
    assert out == {"timestamp": 123}
    assert captured["url"] == "https://example.com/system/time?a=1&b=x%20y"
    assert captured["timeout"] == 10.0


def test_put_sends_payload_bytes_as_json(monkeypatch):
    client = ExchangeClient(base_url="https://example.com", timeout=3.0)
    captured = {}

    def fake_put(url, data=None, headers=None, timeout=None):
        captured.update(url=url, data=data, headers=headers, timeout=timeout)
        return FakeResponse(text='{"data":[]}')

    monkeypatch.setattr(client.session, "put", fake_put)

    client._send(HttpMethod.PUT, "/orders/cancel", payload='{"type":"ALL"}', headers={"X": "1"})
    assert captured["url"] == "https://example.com/orders/cancel"
    assert captured["data"] == b'{"type":"ALL"}'
    assert captured["headers"] == {"X": "1", "Content-Type": "application/json"}
    assert captured["timeout"] == 3.0


def test_auth_error(monkeypatch):
    client = ExchangeClient(base_url="https://example.com")

    def fake_get(url, headers=None, timeout=None):
        return FakeResponse(text="unauthorized", status_code=401)

    monkeypatch.setattr(client.session, "get", fake_get)

    with pytest.raises(ExchangeAuthError) as exc:
        client._send(HttpMethod.GET, "/me")
    assert exc.value.status_code == 401
    assert exc.value.path == "/me"


def test_http_error(monkeypatch):
    client = ExchangeClient(base_url="https://example.com")

    def fake_get(url, headers=None, timeout=None):
        return FakeResponse(text="server error", status_code=500)

    monkeypatch.setattr(client.session, "get", fake_get)

    with pytest.raises(ExchangeHTTPError) as exc:
        client._send(HttpMethod.GET, "/system/time")
    assert str(exc.value) == "server error"
    assert not isinstance(exc.value, ExchangeAuthError)


def test_invalid_json_is_decode_error(monkeypatch):
    client = ExchangeClient(base_url="https://example.com")

    def fake_get(url, headers=None, timeout=None):
        return FakeResponse(text="<html>oops</html>")

    monkeypatch.setattr(client.session, "get", fake_get)

    with pytest.raises(ExchangeDecodeError) as exc:
        client._send(HttpMethod.GET, "/system/time")
    assert exc.value.body == "<html>oops</html>"
    assert isinstance(exc.value.cause, ValueError)


def test_network_timeout(monkeypatch):
    client = ExchangeClient(base_url="https://example.com")

    def fake_get(url, headers=None, timeout=None):
        raise requests.exceptions.Timeout("timeout")

    monkeypatch.setattr(client.session, "get", fake_get)

    with pytest.raises(ExchangeNetworkError) as exc:
        client._send(HttpMethod.GET, "/system/time")
    assert isinstance(exc.value.cause, requests.exceptions.Timeout)


def test_connection_error_is_not_disguised_as_decode_error(monkeypatch):
    client = ExchangeClient(base_url="https://example.com")

    def fake_post(url, data=None, headers=None, timeout=None):
        raise requests.exceptions.ConnectionError("dns failure")

    monkeypatch.setattr(client.session, "post", fake_post)

    with pytest.raises(ExchangeNetworkError) as exc:
        client._send(HttpMethod.POST, "/orders", payload="{}")
    assert not isinstance(exc.value, ExchangeDecodeError)
    assert "dns failure" in str(exc.value)


def test_unwrap_data_rejects_bare_payload():
    client = ExchangeClient(base_url="https://example.com")

    assert client._unwrap_data({"data": [1, 2]}, "/banks") == [1, 2]
    with pytest.raises(ExchangeDecodeError):
        client._unwrap_data([1, 2], "/banks")
    with pytest.raises(ExchangeDecodeError):
        client._unwrap_data({"data": {"id": 1}}, "/banks")
