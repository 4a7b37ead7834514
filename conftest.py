import json

import httpx
import pytest
from fastapi import Depends

from hostaway_gateway.api.deps import get_hostaway_client
from hostaway_gateway.core.config import Settings, get_settings
from hostaway_gateway.main import app
from hostaway_gateway.services.hostaway import HostawayClient

BASE_URL = "https://hostaway.test"
LISTING_ID = "240871"


def price_details_body(components=None, total_price=105.0, finance_field=None, currency="CHF"):
    if components is None:
        components = [
            {"type": "accommodation", "name": "baseRate", "total": 100},
            {"type": "cleaningFee", "name": "cleaningFee", "total": 20},
            {"type": "discount", "name": "weeklyDiscount", "total": -15},
        ]
    if finance_field is None:
        finance_field = {"baseRate": 100, "cleaningFeeValue": 20, "weeklyDiscount": -15}
    return {
        "status": "success",
        "result": {
            "totalPrice": total_price,
            "currency": currency,
            "components": components,
            "financeField": finance_field,
        },
    }


class FakeHostaway:
    """In-memory Hostaway API served through httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.token = (200, {"access_token": "token-abc", "token_type": "Bearer"})
        self.price = (200, price_details_body())
        self.price_by_channel = {}
        self.reservation = (200, {"status": "success", "result": {"id": 98765, "status": "new"}})
        self.channels = (200, {"status": "success", "result": [
            {"id": 2000, "name": "Airbnb", "type": "airbnb", "isActive": True},
            {"channelId": 2020, "channelName": "Website", "channelType": "direct", "active": True},
        ]})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/v1/accessTokens":
            status, body = self.token
        elif path.endswith("/calendar/priceDetails"):
            channel_id = json.loads(request.content).get("channelId")
            status, body = self.price_by_channel.get(channel_id, self.price)
        elif path == "/v1/reservations":
            status, body = self.reservation
        elif path == "/v1/channels":
            status, body = self.channels
        else:
            status, body = 404, {"status": "fail", "message": "Not found"}

        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, content=body)

    def calls_to(self, suffix: str) -> list:
        return [r for r in self.requests if r.url.path.endswith(suffix)]


def make_settings(**overrides) -> Settings:
    values = {
        "HOSTAWAY_BASE_URL": BASE_URL,
        "HOSTAWAY_ACCOUNT_ID": "61234",
        "HOSTAWAY_API_KEY": "test-api-key",
        "HOSTAWAY_LISTING_ID": LISTING_ID,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def price_body():
    return price_details_body


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def fake_hostaway():
    return FakeHostaway()


@pytest.fixture
def gateway_settings():
    return make_settings()


@pytest.fixture
def hostaway_client(fake_hostaway):
    return HostawayClient(BASE_URL, "61234", "test-api-key", transport=fake_hostaway.transport)


@pytest.fixture
async def test_client(fake_hostaway, gateway_settings):
    async def override_client(settings: Settings = Depends(get_settings)):
        async with HostawayClient.from_settings(settings, transport=fake_hostaway.transport) as client:
            yield client

    app.dependency_overrides[get_settings] = lambda: gateway_settings
    app.dependency_overrides[get_hostaway_client] = override_client

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def valid_stay_data():
    return {"arrival": "2025-07-01", "departure": "2025-07-04", "guests": 2}


@pytest.fixture
def valid_booking_data(valid_stay_data):
    return {
        **valid_stay_data,
        "name": "Ana Maria Horvat",
        "email": "ana@example.com",
        "phone": "+41 79 123 45 67",
    }


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that drive the HTTP app"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "booking: marks tests related to reservation submission"
    )

