"""
tests.conftest - Pytest fixtures for the price history proxy.

IsThereAnyDeal is replaced by an httpx.MockTransport serving canned responses.
"""

from __future__ import annotations

import json
from typing import Any, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from price_history_proxy.any_deal_api import AnyDealAPI

TEST_API_KEY = "test-key"

LOOKUP_PATH = "/lookup/id/shop/61/v1"
HISTORY_LOW_PATH = "/games/historylow/v1"
HISTORY_PATH = "/games/history/v2"

GID = "018d937f-11e8-7218-9d34-6f0f4e6b3b4e"

HISTORY_LOW_RESPONSE = [
    {
        "id": GID,
        "low": {
            "shop": {"id": 61, "name": "Steam"},
            "price": {"amount": 1999.0, "amountInt": 199900, "currency": "ARS"},
            "regular": {"amount": 7999.0, "amountInt": 799900, "currency": "ARS"},
            "cut": 75,
            "timestamp": 1672531200,
        },
    }
]

# Unsorted on purpose, the 2022 entry is the oldest
HISTORY_RESPONSE = [
    {
        "timestamp": "2023-01-01",
        "shop": {"id": 61, "name": "Steam"},
        "deal": {
            "price": {"amount": 10, "currency": "USD"},
            "regular": {"amount": 50, "currency": "USD"},
            "cut": 80,
        },
    },
    {
        "timestamp": "2022-06-01",
        "shop": {"id": 61, "name": "Steam"},
        "deal": {
            "price": {"amount": 40, "currency": "USD"},
            "regular": {"amount": 40, "currency": "USD"},
            "cut": 0,
        },
    },
]


class FakeAnyDeal:
    """Canned IsThereAnyDeal API keyed by request path."""

    def __init__(self) -> None:
        self.responses: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, path: str, status_code: int = 200, body: Any = None) -> None:
        self.responses[path] = (status_code, body)

    def fail_with(self, path: str, error: Exception) -> None:
        self.responses[path] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        canned = self.responses.get(request.url.path)
        if canned is None:
            return httpx.Response(404, json={"status_code": 404, "reason_phrase": "Not Found"})
        if isinstance(canned, Exception):
            raise canned
        status_code, body = canned
        return httpx.Response(status_code, json=body)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    @staticmethod
    def body_of(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def fake_any_deal() -> FakeAnyDeal:
    """Upstream answering a known game with a full history."""
    fake = FakeAnyDeal()
    fake.respond(LOOKUP_PATH, body={"app/620": GID})
    fake.respond(HISTORY_LOW_PATH, body=HISTORY_LOW_RESPONSE)
    fake.respond(HISTORY_PATH, body=HISTORY_RESPONSE)
    return fake


@pytest.fixture
def any_deal_client(fake_any_deal: FakeAnyDeal) -> AnyDealAPI:
    """AnyDealAPI wired to the fake upstream."""
    return AnyDealAPI(TEST_API_KEY, transport=httpx.MockTransport(fake_any_deal.handler))


@pytest.fixture
def client(any_deal_client: AnyDealAPI) -> Generator[TestClient, None, None]:
    """Test client for a proxy with a configured API key."""
    from price_history_proxy.server import app, get_any_deal

    app.dependency_overrides[get_any_deal] = lambda: any_deal_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client() -> Generator[TestClient, None, None]:
    """Test client for a proxy started without ITAD_API_KEY."""
    from price_history_proxy.server import app, get_any_deal

    app.dependency_overrides[get_any_deal] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
