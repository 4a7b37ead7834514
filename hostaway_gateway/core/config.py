from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from hostaway_gateway.core.enums import DiscountScope, PricingPolicy
from hostaway_gateway.core.errors import ConfigurationError


class Settings(BaseSettings):
    HOSTAWAY_BASE_URL: str = "https://api.hostaway.com"

    HOSTAWAY_ACCOUNT_ID: str = ""
    HOSTAWAY_API_KEY: str = ""

    HOSTAWAY_LISTING_ID: str = ""
    HOSTAWAY_DIRECT_CHANNEL_ID: Optional[int] = None

    PRICING_POLICY: PricingPolicy = PricingPolicy.COMPONENT_SUM
    WEBSITE_DISCOUNT_PCT: float = 10.0
    DISCOUNT_SCOPE: DiscountScope = DiscountScope.ACCOMMODATION

    BOOKING_CHANNEL_ID: int = 2020  # partner/website
    BOOKING_SOURCE: str = "website"

    DEFAULT_CURRENCY: str = "CHF"
    UPSTREAM_TIMEOUT: Optional[float] = None  # seconds, None disables

    API_TITLE: str = "Hostaway Price & Booking Gateway"
    API_DESCRIPTION: str = "Guest-facing price quotes and reservations on top of the Hostaway API"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"

    @field_validator("HOSTAWAY_DIRECT_CHANNEL_ID", "UPSTREAM_TIMEOUT", mode="before")
    @classmethod
    def _blank_as_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True

    def require_listing_id(self) -> int:
        value = self.HOSTAWAY_LISTING_ID.strip()
        if not value.isdigit():
            raise ConfigurationError("Missing/invalid HOSTAWAY_LISTING_ID env var")
        return int(value)


settings = Settings()


def get_settings() -> Settings:
    return settings
