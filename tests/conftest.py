"""Pytest fixtures for testing"""

import json
from typing import Any, Callable, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

from mocks.plaid_server.main import CLIENT_ID, SECRET, app
from plaid_client.domain.models import Credentials, Environment
from plaid_client.infrastructure.clients.plaid import PlaidClient


@pytest.fixture
def credentials() -> Credentials:
    """Credentials accepted by the mock sandbox"""
    return Credentials(client_id=CLIENT_ID, secret=SECRET)


@pytest.fixture
def make_client(credentials: Credentials) -> Generator[Callable[..., PlaidClient], None, None]:
    """Build a PlaidClient whose HTTP calls are answered by ``handler``"""
    http_clients: List[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> PlaidClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        http_clients.append(http_client)
        return PlaidClient(credentials, Environment.SANDBOX, http_client=http_client, **kwargs)

    yield _make

    for http_client in http_clients:
        http_client.close()


@pytest.fixture
def sandbox_client(credentials: Credentials) -> Generator[PlaidClient, None, None]:
    """PlaidClient talking to the mock sandbox server in-process"""
    with TestClient(app) as http_client:
        yield PlaidClient(credentials, Environment.SANDBOX, http_client=http_client)


@pytest.fixture
def body() -> Callable[[Any], bytes]:
    """Encode a JSON value the way it arrives off the wire"""

    def _encode(value: Any) -> bytes:
        return json.dumps(value).encode("utf-8")

    return _encode
