import logging
from typing import Any, Tuple

from hostaway_gateway.core.config import Settings
from hostaway_gateway.schemas.quote import PriceQuote
from hostaway_gateway.schemas.reservation import ReservationPayload
from hostaway_gateway.schemas.stay import BookingRequest
from hostaway_gateway.services.hostaway import HostawayClient
from hostaway_gateway.services.pricing import PriceComputationError

logger = logging.getLogger(__name__)


def split_name(full_name: Any) -> Tuple[str, str]:
    parts = str(full_name or "").split()
    first_name = parts[0] if parts else ""
    last_name = " ".join(parts[1:]) or "-"
    return first_name, last_name


def ensure_bookable(quote: PriceQuote, raw: Any) -> None:
    if not quote.finance_field:
        raise PriceComputationError("Missing totalPrice/financeField in priceDetails response", raw)


def build_reservation_payload(
    booking: BookingRequest,
    quote: PriceQuote,
    listing_id: int,
    settings: Settings,
) -> ReservationPayload:
    first_name, last_name = split_name(booking.name)
    return ReservationPayload(
        channel_id=settings.BOOKING_CHANNEL_ID,
        listing_map_id=listing_id,
        listing_id=listing_id,
        source=settings.BOOKING_SOURCE,
        arrival_date=booking.arrival.isoformat(),
        departure_date=booking.departure.isoformat(),
        number_of_guests=booking.guests,
        guest_name=booking.name,
        guest_email=booking.email,
        guest_phone=booking.phone,
        first_name=first_name,
        last_name=last_name,
        total_price=quote.breakdown.total_price,
        finance_field=quote.finance_field,
    )


async def submit_reservation(client: HostawayClient, payload: ReservationPayload) -> Any:
    """Create the reservation. Failures propagate as HostawayApiError; nothing is retried or undone."""
    logger.info(
        f"Submitting reservation for listing {payload.listing_id} "
        f"({payload.arrival_date} -> {payload.departure_date}, total {payload.total_price})"
    )
    return await client.create_reservation(payload.to_json())
