from typing import Any, List, Optional

from hostaway_gateway.schemas.base import ApiModel


class ChannelSummary(ApiModel):
    id: Optional[Any] = None
    name: Optional[Any] = None
    type: Optional[Any] = None
    is_active: Optional[Any] = None
    raw: Any = None


class ChannelList(ApiModel):
    count: int
    channels: List[ChannelSummary]


class ProbeOutcome(ApiModel):
    channel_id: Optional[int] = None
    ok: bool
    status: Optional[int] = None
    message: Optional[str] = None
    payload_sent: dict
    currency: Optional[str] = None
    accommodation_subtotal: Optional[float] = None
    other_included_total: Optional[float] = None
    total_price: Optional[float] = None
    components: Optional[List[Any]] = None
    raw: Any = None


class BestGuess(ApiModel):
    channel_id: int
    accommodation_subtotal: Optional[float] = None
    other_included_total: Optional[float] = None
    total_price: Optional[float] = None
    currency: Optional[str] = None


class ProbeReport(ApiModel):
    listing_id: str
    nights: int
    guests: int
    arrival: str
    departure: str
    baseline: ProbeOutcome
    probed_count: int
    results: List[ProbeOutcome]
    best_guess: Optional[BestGuess] = None
    note: str
