from typing import AsyncIterator

from fastapi import Depends

from hostaway_gateway.core.config import Settings, get_settings
from hostaway_gateway.services.hostaway import HostawayClient


async def get_hostaway_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[HostawayClient]:
    async with HostawayClient.from_settings(settings) as client:
        yield client
