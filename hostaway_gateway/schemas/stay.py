import math
import re
from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from hostaway_gateway.utils.money import to_number

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MIN_GUESTS = 1
MAX_GUESTS = 10
MAX_PROBE_CHANNELS = 12
BOOKING_REQUIRED_FIELDS = ("arrival", "departure", "name", "email", "phone", "guests")


class InvalidDatesError(ValueError):
    hint = "Departure must be after Arrival (min 1 night)."

    def __init__(self):
        super().__init__("Invalid dates")


def clamp_guests(value: Any) -> int:
    """Unusable input counts as one guest; infinities clamp to the nearest bound."""
    try:
        number = float(value)
    except OverflowError:
        number = math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        number = math.nan
    if isinstance(value, bool) or math.isnan(number) or not number:
        number = MIN_GUESTS
    return int(max(MIN_GUESTS, min(MAX_GUESTS, number)))


class StayRequest(BaseModel):
    arrival: date = Field(default=None, validate_default=True)
    departure: date = Field(default=None, validate_default=True)
    guests: int = Field(default=MIN_GUESTS, validate_default=True)

    @field_validator("arrival", "departure", mode="before")
    @classmethod
    def _iso_date(cls, value: Any) -> date:
        if not isinstance(value, str) or not ISO_DATE_RE.fullmatch(value):
            raise ValueError("arrival and departure must be YYYY-MM-DD")
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise InvalidDatesError()

    @field_validator("guests", mode="before")
    @classmethod
    def _clamp_guests(cls, value: Any) -> int:
        return clamp_guests(value)

    @property
    def nights(self) -> int:
        return (self.departure - self.arrival).days

    @model_validator(mode="after")
    def _at_least_one_night(self):
        if self.nights < 1:
            raise InvalidDatesError()
        return self


class BookingRequest(StayRequest):
    name: str
    email: str
    phone: str

    @model_validator(mode="before")
    @classmethod
    def _require_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        for field in BOOKING_REQUIRED_FIELDS:
            if not data.get(field):
                raise ValueError(f"Missing field: {field}")
        return data

    @field_validator("name", "email", "phone", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return str(value).strip()


class ProbeRequest(StayRequest):
    channel_ids: Optional[List[int]] = Field(default=None, alias="channelIds")

    @field_validator("channel_ids", mode="before")
    @classmethod
    def _numeric_channel_ids(cls, value: Any) -> Optional[List[int]]:
        if not isinstance(value, list) or not value:
            return None
        numbers = [to_number(item) for item in value]
        return [int(n) for n in numbers if n is not None][:MAX_PROBE_CHANNELS]
