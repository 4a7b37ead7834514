from typing import Any, Optional

from hostaway_gateway.schemas.base import ApiModel


class ReservationPayload(ApiModel):
    channel_id: int
    listing_map_id: int
    listing_id: int
    source: str

    arrival_date: str
    departure_date: str
    number_of_guests: int

    guest_name: str
    guest_email: str
    guest_phone: str
    first_name: str
    last_name: str

    total_price: float
    finance_field: Any


class BookingResponse(ApiModel):
    message: str
    nights: int
    channel_id: int
    currency: str
    total_price_sent_to_hostaway: float
    hostaway: Optional[Any] = None
