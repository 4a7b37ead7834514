"""Derive the guest-facing total from a Hostaway priceDetails response.

Exactly one policy is applied per quote:

* component_sum: accommodation plus every other component except ``discount``.
  Channel markups are expected inside the accommodation component.
* percentage_discount: a fixed website discount applied either to the
  accommodation subtotal or to the whole upstream total.
"""
import logging
from typing import Any, Callable, Iterable, Optional

from hostaway_gateway.core.config import Settings
from hostaway_gateway.core.enums import ComponentType, DiscountScope, PricingPolicy
from hostaway_gateway.core.errors import UpstreamError
from hostaway_gateway.core.metrics import quotes_computed
from hostaway_gateway.schemas.quote import PriceQuote, QuoteBreakdown
from hostaway_gateway.services.hostaway import unwrap_result
from hostaway_gateway.utils.money import round2, to_number

logger = logging.getLogger(__name__)

ACCOMMODATION = ComponentType.ACCOMMODATION.value
DISCOUNT = ComponentType.DISCOUNT.value


class PriceComputationError(UpstreamError):
    """The priceDetails answer lacks what the active policy needs."""

    def __init__(self, error: str, raw: Any = None):
        super().__init__(error=error, details=raw)
        self.raw = raw


def sum_totals(components: Iterable[Any], predicate: Callable[[dict], bool]) -> float:
    total = 0.0
    for component in components:
        if not isinstance(component, dict) or not predicate(component):
            continue
        amount = to_number(component.get("total"))
        if amount is not None:
            total += amount
    return total


def is_accommodation(component: dict) -> bool:
    return component.get("type") == ACCOMMODATION


def is_included_extra(component: dict) -> bool:
    return component.get("type") not in (ACCOMMODATION, DISCOUNT)


def is_discount(component: dict) -> bool:
    return component.get("type") == DISCOUNT


def is_fee(component: dict) -> bool:
    return component.get("type") != ACCOMMODATION


def _first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def _data(raw: Any) -> dict:
    data = raw.get("data") if isinstance(raw, dict) else None
    return data if isinstance(data, dict) else {}


def extract_components(raw: Any) -> Optional[list]:
    result = unwrap_result(raw)
    components = result.get("components") if isinstance(result, dict) else None
    return components if isinstance(components, list) else None


def extract_total_price(raw: Any) -> Optional[float]:
    result = unwrap_result(raw)
    for source in (result, raw, _data(raw)):
        if isinstance(source, dict):
            total = to_number(source.get("totalPrice"))
            if total is not None:
                return total
    return None


def extract_finance_field(raw: Any) -> Any:
    result = unwrap_result(raw)
    return _first_present(
        result.get("financeField") if isinstance(result, dict) else None,
        raw.get("financeField") if isinstance(raw, dict) else None,
        _data(raw).get("financeField"),
    )


def extract_currency(raw: Any, default: str) -> str:
    result = unwrap_result(raw)
    return _first_present(
        result.get("currency") if isinstance(result, dict) else None,
        raw.get("currency") if isinstance(raw, dict) else None,
        _data(raw).get("currency"),
    ) or default


def _per_night(amount: Optional[float], nights: int) -> Optional[float]:
    if amount is None or nights < 1:
        return None
    return round2(amount / nights)


def component_sum(raw: Any, nights: int) -> QuoteBreakdown:
    components = extract_components(raw)
    if components is None:
        raise PriceComputationError("Hostaway response missing components[]", raw)

    accommodation = sum_totals(components, is_accommodation)
    extras = sum_totals(components, is_included_extra)
    excluded = sum_totals(components, is_discount)
    upstream_total = extract_total_price(raw)

    return QuoteBreakdown(
        policy=PricingPolicy.COMPONENT_SUM,
        accommodation_subtotal_base=round2(accommodation),
        accommodation_subtotal=round2(accommodation),
        fees_total=round2(extras),
        excluded_discounts_total=round2(excluded),
        total_price_base=round2(upstream_total) if upstream_total else None,
        total_price=round2(accommodation + extras),
        per_night=_per_night(accommodation, nights),
    )


def percentage_discount(
    raw: Any,
    nights: int,
    discount_pct: float,
    scope: DiscountScope = DiscountScope.ACCOMMODATION,
) -> QuoteBreakdown:
    pct = max(0.0, min(100.0, discount_pct))
    multiplier = 1 - pct / 100
    components = extract_components(raw)
    upstream_total = extract_total_price(raw)

    if scope == DiscountScope.TOTAL:
        if upstream_total is None:
            raise PriceComputationError("Hostaway response missing totalPrice", raw)
        accommodation_base = sum_totals(components, is_accommodation) if components else None
        return QuoteBreakdown(
            policy=PricingPolicy.PERCENTAGE_DISCOUNT,
            accommodation_subtotal_base=round2(accommodation_base),
            total_price_base=round2(upstream_total),
            total_price=round2(upstream_total * multiplier),
            per_night=_per_night(accommodation_base, nights),
            discount_pct=round2(pct),
        )

    if components is None:
        raise PriceComputationError("Hostaway response missing components[]", raw)

    accommodation_base = sum_totals(components, is_accommodation)
    if accommodation_base <= 0:
        raise PriceComputationError("Could not compute accommodation subtotal from components", raw)

    fees = sum_totals(components, is_fee)
    accommodation = round2(accommodation_base * multiplier)

    return QuoteBreakdown(
        policy=PricingPolicy.PERCENTAGE_DISCOUNT,
        accommodation_subtotal_base=round2(accommodation_base),
        accommodation_subtotal=accommodation,
        fees_total=round2(fees),
        total_price_base=round2(upstream_total) if upstream_total else None,
        total_price=round2(accommodation + fees),
        per_night=_per_night(accommodation, nights),
        discount_pct=round2(pct),
    )


def compute_quote(raw: Any, nights: int, settings: Settings) -> PriceQuote:
    if settings.PRICING_POLICY == PricingPolicy.PERCENTAGE_DISCOUNT:
        breakdown = percentage_discount(
            raw, nights, settings.WEBSITE_DISCOUNT_PCT, settings.DISCOUNT_SCOPE
        )
    else:
        breakdown = component_sum(raw, nights)

    quotes_computed.labels(policy=breakdown.policy.value).inc()
    logger.info(f"Quote computed with {breakdown.policy} policy: total {breakdown.total_price}")

    return PriceQuote(
        currency=extract_currency(raw, settings.DEFAULT_CURRENCY),
        breakdown=breakdown,
        finance_field=extract_finance_field(raw),
    )


def pricing_channel_id(settings: Settings) -> Optional[int]:
    """Channel sent with the priceDetails call; only the component-sum policy is channel-aware."""
    if settings.PRICING_POLICY == PricingPolicy.COMPONENT_SUM:
        return settings.HOSTAWAY_DIRECT_CHANNEL_ID
    return None
