"""Price quote models - ephemeral flight/hotel estimates."""

from enum import Enum

from pydantic import BaseModel


class QuoteSource(str, Enum):
    """Where a quote pair came from."""

    live = "live"  # exact dates
    route = "route"  # route-level price without dates
    placeholder = "placeholder"


class FlightQuote(BaseModel):
    """Indicative round-trip flight price with an affiliate link."""

    outbound: str
    return_: str
    airline: str | None = None
    est_cost: float
    currency: str = "USD"
    booking_url: str

    @property
    def description(self) -> str:
        """Human-readable summary."""
        return f"{self.outbound} / {self.return_}"


class HotelQuote(BaseModel):
    """Indicative nightly hotel price with an affiliate link."""

    name: str
    stars: int = 4
    est_cost_per_night: float
    currency: str = "USD"
    booking_url: str

    @property
    def description(self) -> str:
        """Human-readable summary."""
        return f"{self.name} ({self.stars}★)"


class QuoteSet(BaseModel):
    """Flight and hotel quote pair for one request."""

    flight: FlightQuote
    hotel: HotelQuote
    source: QuoteSource
    origin_code: str
    destination_code: str
