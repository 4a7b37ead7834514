from typing import Any, Optional

from hostaway_gateway.core.enums import PricingPolicy
from hostaway_gateway.schemas.base import ApiModel


class QuoteBreakdown(ApiModel):
    policy: PricingPolicy
    accommodation_subtotal_base: Optional[float] = None
    accommodation_subtotal: Optional[float] = None
    fees_total: Optional[float] = None
    excluded_discounts_total: Optional[float] = None
    total_price_base: Optional[float] = None
    total_price: float
    per_night: Optional[float] = None
    discount_pct: Optional[float] = None


class PriceQuote(ApiModel):
    """A computed quote plus the upstream pass-through data needed to book it."""

    currency: str
    breakdown: QuoteBreakdown
    finance_field: Any = None


class QuoteResponse(ApiModel):
    currency: str
    nights: int
    guests: int
    channel_id: Optional[int] = None
    breakdown: QuoteBreakdown
