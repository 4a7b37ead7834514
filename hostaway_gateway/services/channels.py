import logging
from typing import Any, List, Optional

from hostaway_gateway.core.errors import UpstreamError
from hostaway_gateway.schemas.channel import BestGuess, ChannelSummary, ProbeOutcome
from hostaway_gateway.services.hostaway import HostawayApiError, HostawayClient, unwrap_result
from hostaway_gateway.services.pricing import (
    PriceComputationError,
    component_sum,
    extract_components,
    extract_currency,
)

logger = logging.getLogger(__name__)

DEFAULT_PROBE_CHANNELS = [2013, 2020, 2000, 2001, 2002, 2003, 2004, 2005]


def _pick(record: dict, *keys: str) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def summarize_channels(raw: Any) -> List[ChannelSummary]:
    result = unwrap_result(raw)
    if isinstance(result, dict):
        result = result.get("channels")
    if not isinstance(result, list):
        raise UpstreamError(error="Unexpected channels response shape", details=raw)

    return [
        ChannelSummary(
            id=_pick(channel, "id", "channelId", "channel_id"),
            name=_pick(channel, "name", "channelName"),
            type=_pick(channel, "type", "channelType"),
            is_active=_pick(channel, "isActive", "active"),
            raw=channel,
        )
        for channel in result
        if isinstance(channel, dict)
    ]


async def probe_channel(
    client: HostawayClient,
    listing_id: int,
    arrival: str,
    departure: str,
    guests: int,
    nights: int,
    default_currency: str,
    channel_id: Optional[int] = None,
) -> ProbeOutcome:
    payload = client.price_details_payload(arrival, departure, guests, channel_id)
    try:
        raw = await client.get_price_details(listing_id, arrival, departure, guests, channel_id)
        breakdown = component_sum(raw, nights)
    except HostawayApiError as exc:
        return ProbeOutcome(
            channel_id=channel_id, ok=False, status=exc.status_code,
            message=exc.message, payload_sent=payload, raw=exc.details,
        )
    except PriceComputationError as exc:
        return ProbeOutcome(
            channel_id=channel_id, ok=False, status=exc.status_code,
            message="Missing components[] in response", payload_sent=payload, raw=exc.raw,
        )

    return ProbeOutcome(
        channel_id=channel_id,
        ok=True,
        payload_sent=payload,
        currency=extract_currency(raw, default_currency),
        accommodation_subtotal=breakdown.accommodation_subtotal,
        other_included_total=breakdown.fees_total,
        total_price=breakdown.total_price,
        components=extract_components(raw),
    )


def best_guess(outcomes: List[ProbeOutcome]) -> Optional[BestGuess]:
    """Lowest accommodation subtotal wins: that is where a channel markdown shows up."""
    candidates = [o for o in outcomes if o.ok and o.channel_id is not None]
    if not candidates:
        return None
    best = min(
        candidates,
        key=lambda o: o.accommodation_subtotal if o.accommodation_subtotal is not None else float("inf"),
    )
    return BestGuess(
        channel_id=best.channel_id,
        accommodation_subtotal=best.accommodation_subtotal,
        other_included_total=best.other_included_total,
        total_price=best.total_price,
        currency=best.currency,
    )
