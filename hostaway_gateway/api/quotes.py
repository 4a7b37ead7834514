"""Price quote endpoint"""
import logging

from fastapi import APIRouter, Depends, Request

from hostaway_gateway.api.deps import get_hostaway_client
from hostaway_gateway.core.config import Settings, get_settings
from hostaway_gateway.core.responses import json_response, preflight_response
from hostaway_gateway.schemas.quote import QuoteResponse
from hostaway_gateway.schemas.stay import StayRequest
from hostaway_gateway.services.hostaway import HostawayClient
from hostaway_gateway.services.pricing import compute_quote, pricing_channel_id
from hostaway_gateway.services.validation import parse_request, read_json_body

logger = logging.getLogger(__name__)
router = APIRouter(tags=["quotes"])


@router.post("/price", response_model=QuoteResponse)
async def price(
    request: Request,
    settings: Settings = Depends(get_settings),
    hostaway: HostawayClient = Depends(get_hostaway_client),
):
    stay = parse_request(StayRequest, await read_json_body(request))
    listing_id = settings.require_listing_id()
    channel_id = pricing_channel_id(settings)

    await hostaway.authenticate()
    raw = await hostaway.get_price_details(
        listing_id,
        stay.arrival.isoformat(),
        stay.departure.isoformat(),
        stay.guests,
        channel_id,
    )
    quote = compute_quote(raw, stay.nights, settings)

    result = QuoteResponse(
        currency=quote.currency,
        nights=stay.nights,
        guests=stay.guests,
        channel_id=channel_id,
        breakdown=quote.breakdown,
    )
    return json_response(200, result.to_json())


@router.options("/price", include_in_schema=False)
async def price_preflight():
    return preflight_response(["POST"])
