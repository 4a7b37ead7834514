"""Booking endpoint: price the stay, then create the Hostaway reservation"""
import logging

from fastapi import APIRouter, Depends, Request

from hostaway_gateway.api.deps import get_hostaway_client
from hostaway_gateway.core.config import Settings, get_settings
from hostaway_gateway.core.errors import UpstreamError
from hostaway_gateway.core.responses import json_response, preflight_response
from hostaway_gateway.schemas.reservation import BookingResponse
from hostaway_gateway.schemas.stay import BookingRequest
from hostaway_gateway.services.booking import build_reservation_payload, ensure_bookable, submit_reservation
from hostaway_gateway.services.hostaway import HostawayApiError, HostawayClient
from hostaway_gateway.services.pricing import PriceComputationError, compute_quote, pricing_channel_id
from hostaway_gateway.services.validation import parse_request, read_json_body

logger = logging.getLogger(__name__)
router = APIRouter(tags=["bookings"])


@router.post("/book", response_model=BookingResponse)
async def book(
    request: Request,
    settings: Settings = Depends(get_settings),
    hostaway: HostawayClient = Depends(get_hostaway_client),
):
    booking = parse_request(BookingRequest, await read_json_body(request))
    listing_id = settings.require_listing_id()

    await hostaway.authenticate()

    try:
        raw = await hostaway.get_price_details(
            listing_id,
            booking.arrival.isoformat(),
            booking.departure.isoformat(),
            booking.guests,
            pricing_channel_id(settings),
        )
        quote = compute_quote(raw, booking.nights, settings)
        ensure_bookable(quote, raw)
    except (HostawayApiError, PriceComputationError) as exc:
        logger.warning(f"Price calculation failed before booking: {exc}")
        raise UpstreamError(
            exc.message or exc.error,
            error="Price calculation failed",
            upstream_status=exc.status_code,
            details=exc.details,
        ) from exc

    payload = build_reservation_payload(booking, quote, listing_id, settings)
    reservation = await submit_reservation(hostaway, payload)

    result = BookingResponse(
        message="Booking request created",
        nights=booking.nights,
        channel_id=payload.channel_id,
        currency=quote.currency,
        total_price_sent_to_hostaway=payload.total_price,
        hostaway=reservation,
    )
    return json_response(200, result.to_json())


@router.options("/book", include_in_schema=False)
async def book_preflight():
    return preflight_response(["POST"])
