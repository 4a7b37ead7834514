"""Read-only channel helpers for finding the direct-booking channel id"""
from fastapi import APIRouter, Depends, Request

from hostaway_gateway.api.deps import get_hostaway_client
from hostaway_gateway.core.config import Settings, get_settings
from hostaway_gateway.core.responses import json_response, preflight_response
from hostaway_gateway.schemas.channel import ChannelList, ProbeReport
from hostaway_gateway.schemas.stay import ProbeRequest
from hostaway_gateway.services.channels import (
    DEFAULT_PROBE_CHANNELS,
    best_guess,
    probe_channel,
    summarize_channels,
)
from hostaway_gateway.services.hostaway import HostawayClient
from hostaway_gateway.services.validation import parse_request, read_json_body

router = APIRouter(tags=["channels"])


@router.get("/channels", response_model=ChannelList)
async def list_channels(hostaway: HostawayClient = Depends(get_hostaway_client)):
    await hostaway.authenticate()
    channels = summarize_channels(await hostaway.list_channels())
    result = ChannelList(count=len(channels), channels=channels)
    return json_response(200, result.to_json(), ["GET"])


@router.options("/channels", include_in_schema=False)
async def channels_preflight():
    return preflight_response(["GET"])


@router.post("/probe-channel", response_model=ProbeReport)
async def probe_channels(
    request: Request,
    settings: Settings = Depends(get_settings),
    hostaway: HostawayClient = Depends(get_hostaway_client),
):
    probe = parse_request(ProbeRequest, await read_json_body(request))
    listing_id = settings.require_listing_id()
    channel_ids = DEFAULT_PROBE_CHANNELS if probe.channel_ids is None else probe.channel_ids
    arrival, departure = probe.arrival.isoformat(), probe.departure.isoformat()

    await hostaway.authenticate()

    async def run(channel_id=None):
        return await probe_channel(
            hostaway, listing_id, arrival, departure, probe.guests,
            probe.nights, settings.DEFAULT_CURRENCY, channel_id,
        )

    baseline = await run()
    results = [await run(channel_id) for channel_id in channel_ids]

    report = ProbeReport(
        listing_id=str(listing_id),
        nights=probe.nights,
        guests=probe.guests,
        arrival=arrival,
        departure=departure,
        baseline=baseline,
        probed_count=len(channel_ids),
        results=results,
        best_guess=best_guess(results),
        note="A channel that applies a markdown shows a lower accommodationSubtotal than the baseline.",
    )
    return json_response(200, report.to_json())


@router.options("/probe-channel", include_in_schema=False)
async def probe_preflight():
    return preflight_response(["POST"])
