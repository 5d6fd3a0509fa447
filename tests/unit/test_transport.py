"""Unit tests for the HTTP transport"""

import json
from typing import List

import httpx
import pytest

from plaid_client.domain.exceptions import (
    BodyReadError,
    NetworkError,
    RequestTimeoutError,
    SerializationError,
    TransportError,
)
from plaid_client.domain.models import Environment
from plaid_client.infrastructure.schemas import AccessTokenRequest, ConnectRequest
from plaid_client.infrastructure.transport import RawResponse, Transport


class FailingStream(httpx.SyncByteStream):
    """Body stream that drops the connection mid-read"""

    def __iter__(self):
        raise httpx.ReadError("connection reset by peer")
        yield b""  # pragma: no cover


def _transport(handler, **kwargs) -> Transport:
    return Transport(Environment.SANDBOX, http_client=httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)


def _envelope() -> AccessTokenRequest:
    return AccessTokenRequest(client_id="test_id", secret="test_secret", access_token="test_chase")


def test_send_posts_json_envelope():
    """Test URL, headers and body of an authenticated call"""
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b'{"accounts":[]}')

    raw = _transport(handler).send("POST", "/accounts/get", _envelope())

    assert raw == RawResponse(status_code=200, body=b'{"accounts":[]}')
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://sandbox.plaid.com/accounts/get"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["User-Agent"] == "plaid-python-client"
    assert json.loads(request.content) == {
        "client_id": "test_id",
        "secret": "test_secret",
        "access_token": "test_chase",
    }


def test_send_uses_environment_base_url():
    """Test production environment changes only the host"""
    seen: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={})

    transport = Transport(
        Environment.PRODUCTION,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        user_agent="my-app/1.0",
    )
    transport.send("POST", "/item/get", _envelope())

    assert seen == ["https://production.plaid.com/item/get"]


@pytest.mark.parametrize("method", ["PATCH", "DELETE"])
def test_send_other_verbs_carry_body(method):
    """Test PATCH and DELETE also send the JSON envelope"""
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"message": "ok"})

    _transport(handler).send(method, "/connect", _envelope())

    assert seen[0].method == method
    assert json.loads(seen[0].content)["access_token"] == "test_chase"


def test_send_rejects_get():
    """Test GET is reserved for unauthenticated calls"""
    transport = _transport(lambda request: httpx.Response(200))

    with pytest.raises(ValueError):
        transport.send("GET", "/connect", _envelope())


def test_send_passes_status_and_body_through():
    """Test non-200 responses are handed back untouched"""
    error_body = b'{"error_code":"ITEM_NOT_FOUND","error_type":"ITEM_ERROR","error_message":"m"}'
    transport = _transport(lambda request: httpx.Response(404, content=error_body))

    raw = transport.send("POST", "/item/get", _envelope())

    assert raw.status_code == 404
    assert raw.body == error_body


def test_send_per_call_timeout():
    """Test a per-call deadline overrides the default"""
    seen: List[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.extensions["timeout"])
        return httpx.Response(200, json={})

    transport = _transport(handler, timeout=30.0)
    transport.send("POST", "/item/get", _envelope())
    transport.send("POST", "/item/get", _envelope(), timeout=2.0)

    assert seen[0]["read"] == 30.0
    assert seen[1]["read"] == 2.0


def test_send_zero_timeout_is_kept():
    """Test an explicit zero deadline is not replaced by the default"""
    seen: List[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.extensions["timeout"])
        return httpx.Response(200, json={})

    transport = _transport(handler, timeout=30.0)
    transport.send("POST", "/item/get", _envelope(), timeout=0)
    transport.get("/institutions/all/ins_1", timeout=0)

    assert seen[0]["read"] == 0
    assert seen[1]["read"] == 0


def test_get_is_unauthenticated():
    """Test GET variant sends no body or content type"""
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "First Platypus Bank"})

    raw = _transport(handler).get("/institutions/all/ins_109508")

    assert raw.status_code == 200
    assert seen[0].method == "GET"
    assert str(seen[0].url) == "https://sandbox.plaid.com/institutions/all/ins_109508"
    assert seen[0].content == b""
    assert "Content-Type" not in seen[0].headers
    assert seen[0].headers["User-Agent"] == "plaid-python-client"


def test_network_error():
    """Test connection failures map to NetworkError"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as exc_info:
        _transport(handler).send("POST", "/item/get", _envelope())

    assert not isinstance(exc_info.value, RequestTimeoutError)
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_timeout_error():
    """Test deadline expiry maps to RequestTimeoutError"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RequestTimeoutError):
        _transport(handler).get("/institutions/all/ins_1")


def test_body_read_error():
    """Test a failure while reading the body is its own variant"""
    transport = _transport(lambda request: httpx.Response(200, stream=FailingStream()))

    with pytest.raises(BodyReadError) as exc_info:
        transport.send("POST", "/item/get", _envelope())

    assert not isinstance(exc_info.value, NetworkError)
    assert isinstance(exc_info.value, TransportError)


def test_serialization_error():
    """Test an envelope that cannot be encoded never reaches the network"""
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    envelope = ConnectRequest(
        client_id="id", secret="s", type="chase", username="u", password="p", options={"webhook": object()}
    )

    with pytest.raises(SerializationError):
        _transport(handler).send("POST", "/connect", envelope)

    assert seen == []


def test_close_only_owned_client():
    """Test injected clients are left open, owned ones are closed"""
    injected = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    Transport(Environment.SANDBOX, http_client=injected).close()
    assert not injected.is_closed

    with Transport(Environment.SANDBOX) as owned:
        pass
    assert owned._http.is_closed
