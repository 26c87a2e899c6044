from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient

from apr.api import app
from apr.config import Settings


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


@pytest.fixture
def config():
    """Settings with fast retries and no dependency on the environment."""
    return Settings(
        rpc_url="http://rpc.test",
        rpc_max_attempts=3,
        rpc_backoff_seconds=0.01,
        graph_index_url="http://graph.test/index-node/graphql",
        subgraph_base_url="http://graph.test/subgraphs/name",
        rewards_share_to_holders=Decimal("0.15"),
    )


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Scripted stand-in for ``requests.Session``.

    Each entry of ``responses`` is either a payload dict, a ``FakeResponse``
    or an exception instance to raise from ``post``.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, **kwargs):
        self.calls.append({"url": url, "json": json, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, FakeResponse):
            return item
        return FakeResponse(item)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
