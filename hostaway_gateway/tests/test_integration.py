import json

import pytest

from hostaway_gateway.core.config import get_settings
from hostaway_gateway.main import app

pytestmark = pytest.mark.integration


class TestPriceEndpoint:

    @pytest.mark.asyncio
    async def test_quote_component_sum(self, test_client, valid_stay_data):
        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        data = response.json()
        assert data["currency"] == "CHF"
        assert data["nights"] == 3
        assert data["guests"] == 2
        breakdown = data["breakdown"]
        assert breakdown["policy"] == "component_sum"
        assert breakdown["totalPrice"] == 120.0
        assert breakdown["accommodationSubtotal"] == 100.0
        assert breakdown["feesTotal"] == 20.0
        assert breakdown["totalPriceBase"] == 105.0

    @pytest.mark.asyncio
    async def test_quote_percentage_policy(self, test_client, fake_hostaway, settings_factory, valid_stay_data):
        app.dependency_overrides[get_settings] = lambda: settings_factory(
            PRICING_POLICY="percentage_discount", DISCOUNT_SCOPE="total", HOSTAWAY_DIRECT_CHANNEL_ID=2020
        )
        fake_hostaway.price = (200, {"status": "success", "result": {"totalPrice": 100.0, "currency": "EUR"}})

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "EUR"
        assert data["breakdown"]["totalPrice"] == 90.0
        assert data["breakdown"]["discountPct"] == 10.0
        assert data["channelId"] is None
        sent = json.loads(fake_hostaway.calls_to("/calendar/priceDetails")[0].content)
        assert "channelId" not in sent

    @pytest.mark.asyncio
    async def test_quote_sends_direct_channel(self, test_client, fake_hostaway, settings_factory, valid_stay_data):
        app.dependency_overrides[get_settings] = lambda: settings_factory(HOSTAWAY_DIRECT_CHANNEL_ID=2020)

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.json()["channelId"] == 2020
        sent = json.loads(fake_hostaway.calls_to("/calendar/priceDetails")[0].content)
        assert sent["channelId"] == 2020

    @pytest.mark.asyncio
    async def test_guests_clamped_upstream(self, test_client, fake_hostaway, valid_stay_data):
        response = await test_client.post("/price", json={**valid_stay_data, "guests": 25})

        assert response.json()["guests"] == 10
        sent = json.loads(fake_hostaway.calls_to("/calendar/priceDetails")[0].content)
        assert sent["numberOfGuests"] == 10

    @pytest.mark.asyncio
    async def test_invalid_json(self, test_client, fake_hostaway):
        response = await test_client.post(
            "/price", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}
        assert fake_hostaway.requests == []

    @pytest.mark.asyncio
    async def test_invalid_dates_before_upstream(self, test_client, fake_hostaway):
        response = await test_client.post("/price", json={"arrival": "2025-07-04", "departure": "2025-07-01"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid dates"
        assert response.json()["hint"] == "Departure must be after Arrival (min 1 night)."
        assert fake_hostaway.requests == []

    @pytest.mark.asyncio
    async def test_upstream_status_passthrough(self, test_client, fake_hostaway, valid_stay_data):
        fake_hostaway.price = (429, {"status": "fail", "message": "Too many requests"})

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 429
        data = response.json()
        assert data["error"] == "Hostaway priceDetails failed"
        assert data["message"] == "Too many requests"

    @pytest.mark.asyncio
    async def test_malformed_upstream_body(self, test_client, fake_hostaway, valid_stay_data):
        fake_hostaway.price = (200, {"status": "success", "result": {"totalPrice": 100}})

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 502
        assert response.json()["error"] == "Hostaway response missing components[]"

    @pytest.mark.asyncio
    async def test_token_failure(self, test_client, fake_hostaway, valid_stay_data):
        fake_hostaway.token = (401, {"message": "Unauthorized"})

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 502
        assert response.json()["message"] == "Token request failed: Unauthorized"
        assert fake_hostaway.calls_to("/calendar/priceDetails") == []


class TestBookEndpoint:

    @pytest.mark.asyncio
    async def test_booking_created(self, test_client, fake_hostaway, valid_booking_data):
        response = await test_client.post("/book", json=valid_booking_data)

        assert response.status_code == 200
        data = response.json()
        assert data["nights"] == 3
        assert data["channelId"] == 2020
        assert data["currency"] == "CHF"
        assert data["totalPriceSentToHostaway"] == 120.0
        assert data["hostaway"]["result"]["id"] == 98765

        payload = json.loads(fake_hostaway.calls_to("/v1/reservations")[0].content)
        assert payload == {
            "channelId": 2020,
            "listingMapId": 240871,
            "listingId": 240871,
            "source": "website",
            "arrivalDate": "2025-07-01",
            "departureDate": "2025-07-04",
            "numberOfGuests": 2,
            "guestName": "Ana Maria Horvat",
            "guestEmail": "ana@example.com",
            "guestPhone": "+41 79 123 45 67",
            "firstName": "Ana",
            "lastName": "Maria Horvat",
            "totalPrice": 120.0,
            "financeField": {"baseRate": 100, "cleaningFeeValue": 20, "weeklyDiscount": -15},
        }

    @pytest.mark.asyncio
    async def test_upstream_calls_in_order(self, test_client, fake_hostaway, valid_booking_data):
        await test_client.post("/book", json=valid_booking_data)

        paths = [request.url.path for request in fake_hostaway.requests]
        assert paths == [
            "/v1/accessTokens",
            "/v1/listings/240871/calendar/priceDetails",
            "/v1/reservations",
        ]

    @pytest.mark.asyncio
    async def test_missing_field(self, test_client, fake_hostaway, valid_booking_data):
        data = dict(valid_booking_data)
        del data["email"]

        response = await test_client.post("/book", json=data)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing field: email"}
        assert fake_hostaway.requests == []

    @pytest.mark.asyncio
    async def test_reservation_failure_passthrough(self, test_client, fake_hostaway, valid_booking_data):
        fake_hostaway.reservation = (409, {"status": "fail", "message": "Listing is not available"})

        response = await test_client.post("/book", json=valid_booking_data)

        assert response.status_code == 409
        data = response.json()
        assert data["error"] == "Hostaway reservation create failed"
        assert data["message"] == "Listing is not available"
        assert data["details"] == {"status": "fail", "message": "Listing is not available"}

    @pytest.mark.asyncio
    async def test_price_failure_reported_as_502(self, test_client, fake_hostaway, valid_booking_data):
        fake_hostaway.price = (500, {"status": "fail", "message": "Calendar unavailable"})

        response = await test_client.post("/book", json=valid_booking_data)

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "Price calculation failed"
        assert data["status"] == 500
        assert data["message"] == "Calendar unavailable"
        assert fake_hostaway.calls_to("/v1/reservations") == []

    @pytest.mark.asyncio
    async def test_missing_finance_field(self, test_client, fake_hostaway, price_body, valid_booking_data):
        body = price_body()
        del body["result"]["financeField"]
        fake_hostaway.price = (200, body)

        response = await test_client.post("/book", json=valid_booking_data)

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "Price calculation failed"
        assert data["status"] == 502
        assert data["message"] == "Missing totalPrice/financeField in priceDetails response"
        assert data["details"] == body
        assert fake_hostaway.calls_to("/v1/reservations") == []

    @pytest.mark.asyncio
    async def test_single_word_name(self, test_client, fake_hostaway, valid_booking_data):
        await test_client.post("/book", json={**valid_booking_data, "name": "  Cher  "})

        payload = json.loads(fake_hostaway.calls_to("/v1/reservations")[0].content)
        assert payload["firstName"] == "Cher"
        assert payload["lastName"] == "-"


class TestConfigurationErrors:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,body", [
        ("POST", "/price", {"arrival": "2025-07-01", "departure": "2025-07-04"}),
        ("POST", "/book", {"arrival": "2025-07-01", "departure": "2025-07-04", "guests": 2,
                           "name": "A B", "email": "a@b.ch", "phone": "1"}),
        ("POST", "/probe-channel", {"arrival": "2025-07-01", "departure": "2025-07-04"}),
        ("GET", "/channels", None),
    ])
    async def test_missing_api_key(self, test_client, fake_hostaway, settings_factory, method, path, body):
        app.dependency_overrides[get_settings] = lambda: settings_factory(HOSTAWAY_API_KEY="")

        response = await test_client.request(method, path, json=body)

        assert response.status_code == 500
        assert response.json()["error"] == "Missing HOSTAWAY_ACCOUNT_ID / HOSTAWAY_API_KEY env vars"
        assert fake_hostaway.requests == []

    @pytest.mark.asyncio
    async def test_missing_listing_id(self, test_client, fake_hostaway, settings_factory, valid_stay_data):
        app.dependency_overrides[get_settings] = lambda: settings_factory(HOSTAWAY_LISTING_ID="")

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 500
        assert response.json()["error"] == "Missing/invalid HOSTAWAY_LISTING_ID env var"
        assert fake_hostaway.requests == []


class TestHttpSurface:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path,allowed", [
        ("/price", "POST, OPTIONS"),
        ("/book", "POST, OPTIONS"),
        ("/channels", "GET, OPTIONS"),
    ])
    async def test_preflight(self, test_client, fake_hostaway, path, allowed):
        response = await test_client.options(path)

        assert response.status_code == 204
        assert response.headers["access-control-allow-methods"] == allowed
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
        assert fake_hostaway.requests == []

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, test_client):
        response = await test_client.get("/price")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed. Use POST."}

    @pytest.mark.asyncio
    async def test_method_not_allowed_on_channels(self, test_client):
        response = await test_client.post("/channels", json={})

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed. Use GET."}

    @pytest.mark.asyncio
    async def test_unexpected_exception_reported(self, test_client, valid_stay_data, monkeypatch):
        def explode(*args, **kwargs):
            raise ZeroDivisionError("division by zero")

        monkeypatch.setattr("hostaway_gateway.api.quotes.compute_quote", explode)

        response = await test_client.post("/price", json=valid_stay_data)

        assert response.status_code == 500
        assert response.json() == {"error": "Server crash", "details": "division by zero"}

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_metrics(self, test_client, valid_stay_data):
        await test_client.post("/price", json=valid_stay_data)

        response = await test_client.get("/metrics")

        assert response.status_code == 200
        assert "hostaway_requests_total" in response.text
        assert "quotes_computed_total" in response.text
