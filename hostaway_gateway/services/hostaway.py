"""Async client for the Hostaway public API."""
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from hostaway_gateway.core.config import Settings
from hostaway_gateway.core.errors import ConfigurationError, UpstreamError
from hostaway_gateway.core.metrics import track_upstream

logger = logging.getLogger(__name__)

PRICE_DETAILS_VERSION = 2


class HostawayApiError(UpstreamError):
    """Non-2xx answer from Hostaway; the upstream status is passed through."""

    def __init__(self, error: str, status_code: int, message: str, response: Any = None):
        super().__init__(
            message,
            status_code=status_code or 500,
            error=error,
            details=response,
        )
        self.response = response


class HostawayAuthError(UpstreamError):
    error = "Hostaway authentication failed"


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def upstream_message(body: Any, fallback: str = "unknown") -> str:
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or fallback
    return fallback


def unwrap_result(raw: Any) -> Any:
    """Hostaway wraps payloads as ``{"status": "success", "result": ...}``, sometimes under ``data``."""
    if not isinstance(raw, dict):
        return raw
    data = raw.get("data")
    if raw.get("result") is not None:
        return raw["result"]
    if isinstance(data, dict) and data.get("result") is not None:
        return data["result"]
    if data:
        return data
    return raw


class HostawayClient:
    """
    Per-request Hostaway client. A fresh token is fetched for every instance.

    Usage:
        async with HostawayClient(base_url, account_id, api_key) as client:
            await client.authenticate()
            raw = await client.get_price_details(listing_id, arrival, departure, guests)
    """

    def __init__(
        self,
        base_url: str,
        account_id: str,
        api_key: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.account_id = account_id
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.access_token: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "HostawayClient":
        return cls(
            base_url=settings.HOSTAWAY_BASE_URL,
            account_id=settings.HOSTAWAY_ACCOUNT_ID,
            api_key=settings.HOSTAWAY_API_KEY,
            timeout=settings.UPSTREAM_TIMEOUT,
            **kwargs,
        )

    async def __aenter__(self) -> "HostawayClient":
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with HostawayClient(...)' context.")
        return self._client

    def _auth_headers(self) -> dict:
        if not self.access_token:
            raise RuntimeError("Not authenticated. Call authenticate() first.")
        return {"Authorization": f"Bearer {self.access_token}"}

    async def authenticate(self) -> str:
        """
        Exchange the account id / API key for a bearer token.

        Raises:
            ConfigurationError: credentials are not configured (no request is made)
            HostawayAuthError: Hostaway refused or returned no token
        """
        if not self.account_id or not self.api_key:
            raise ConfigurationError("Missing HOSTAWAY_ACCOUNT_ID / HOSTAWAY_API_KEY env vars")

        response = await self._post_token()
        body = _json_or_empty(response)
        token = body.get("access_token") if isinstance(body, dict) else None
        if not response.is_success or not token:
            logger.warning(f"Hostaway token request failed with status {response.status_code}")
            raise HostawayAuthError(f"Token request failed: {upstream_message(body)}")

        self.access_token = token
        logger.info("Hostaway access token acquired")
        return token

    @track_upstream("access_token")
    async def _post_token(self) -> httpx.Response:
        return await self.client.post(
            f"{self.base_url}/v1/accessTokens",
            data={
                "grant_type": "client_credentials",
                "client_id": self.account_id,
                "client_secret": self.api_key,
                "scope": "general",
            },
        )

    async def get_price_details(
        self,
        listing_id: Any,
        arrival: str,
        departure: str,
        guests: int,
        channel_id: Optional[int] = None,
    ) -> dict:
        """Return the raw priceDetails body. Raises HostawayApiError on a non-2xx answer."""
        payload = self.price_details_payload(arrival, departure, guests, channel_id)
        response = await self._post_price_details(listing_id, payload)
        raw = _json_or_empty(response)
        if not response.is_success:
            logger.warning(
                f"Hostaway priceDetails failed for listing {listing_id}: status {response.status_code}"
            )
            raise HostawayApiError(
                "Hostaway priceDetails failed",
                response.status_code,
                upstream_message(raw),
                raw,
            )
        logger.info(f"Hostaway priceDetails fetched for listing {listing_id} ({arrival} -> {departure})")
        return raw

    @staticmethod
    def price_details_payload(
        arrival: str, departure: str, guests: int, channel_id: Optional[int] = None
    ) -> dict:
        payload = {
            "startingDate": arrival,
            "endingDate": departure,
            "numberOfGuests": guests,
            "version": PRICE_DETAILS_VERSION,
        }
        if channel_id is not None:
            payload["channelId"] = channel_id
        return payload

    @track_upstream("price_details")
    async def _post_price_details(self, listing_id: Any, payload: dict) -> httpx.Response:
        return await self.client.post(
            f"{self.base_url}/v1/listings/{quote(str(listing_id), safe='')}/calendar/priceDetails",
            json=payload,
            headers=self._auth_headers(),
        )

    async def create_reservation(self, payload: dict) -> Any:
        response = await self._post_reservation(payload)
        body = _json_or_empty(response)
        if not response.is_success:
            logger.warning(f"Hostaway reservation create failed: status {response.status_code}")
            raise HostawayApiError(
                "Hostaway reservation create failed",
                response.status_code,
                upstream_message(body, "Unknown error"),
                body,
            )
        logger.info(f"Hostaway reservation created for listing {payload.get('listingId')}")
        return body

    @track_upstream("reservation_create")
    async def _post_reservation(self, payload: dict) -> httpx.Response:
        return await self.client.post(
            f"{self.base_url}/v1/reservations",
            json=payload,
            headers=self._auth_headers(),
        )

    async def list_channels(self) -> Any:
        response = await self._get_channels()
        raw = _json_or_empty(response)
        if not response.is_success:
            raise HostawayApiError(
                "Hostaway /v1/channels failed",
                response.status_code,
                upstream_message(raw),
                raw,
            )
        return raw

    @track_upstream("channels")
    async def _get_channels(self) -> httpx.Response:
        return await self.client.get(
            f"{self.base_url}/v1/channels",
            headers={**self._auth_headers(), "Accept": "application/json"},
        )
