"""Trip request models - user input and preferences."""

from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from tripgen.models.common import Purpose, TransportMode, TravelStyle


class DateRange(BaseModel):
    """Inclusive travel date range."""

    start: date
    end: date

    @field_validator("end")
    @classmethod
    def validate_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        """Ensure end >= start."""
        if "start" in info.data and v < info.data["start"]:
            raise ValueError("end must be >= start")
        return v

    @property
    def day_count(self) -> int:
        """Number of calendar days, counting both endpoints."""
        return (self.end - self.start).days + 1


class FlightTimes(BaseModel):
    """Optional flight-time hints used for day-boundary rules."""

    outbound_arrival: str | None = Field(None, description="Local landing time, e.g. '14:30'")
    return_departure: str | None = Field(None, description="Local takeoff time, e.g. '18:00'")


class GroupComposition(BaseModel):
    """Who is travelling."""

    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    has_elders: bool = False
    needs_accessibility: bool = False


class Preferences(BaseModel):
    """Structured trip-shaping inputs, stored denormalized on the itinerary."""

    style: TravelStyle = TravelStyle.balanced
    transport: TransportMode = TransportMode.mixed
    purposes: Annotated[list[Purpose], Field(max_length=3)] = Field(default_factory=list)
    budget: float | None = Field(None, gt=0)
    dietary_tags: list[str] = Field(default_factory=list)
    dietary_notes: str = ""
    must_visit: str = ""
    group: GroupComposition = Field(default_factory=GroupComposition)
    requests: str = ""


class GenerateTripRequest(BaseModel):
    """Request body for POST /generate-trip."""

    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    dates: DateRange
    flight_times: FlightTimes = Field(default_factory=FlightTimes)
    lodging: str | None = Field(None, description="Where the traveller is staying, if known")
    preferences: Preferences = Field(default_factory=Preferences)
    currency: str = "USD"
    ui_language: str | None = None


class UpdateTripRequest(BaseModel):
    """Request body for POST /update-trip."""

    current_itinerary: dict[str, Any]
    itinerary_id: str | None = None
    user_message: str = Field(..., min_length=1)
    ui_language: str | None = None
    currency: str = "USD"

    @field_validator("current_itinerary")
    @classmethod
    def validate_itinerary_not_empty(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Reject an empty itinerary object."""
        if not v:
            raise ValueError("current_itinerary must not be empty")
        return v

    @field_validator("user_message")
    @classmethod
    def validate_message_not_blank(cls, v: str) -> str:
        """Reject whitespace-only modification requests."""
        if not v.strip():
            raise ValueError("user_message must not be blank")
        return v


class TripResponse(BaseModel):
    """Response for POST /generate-trip and POST /update-trip."""

    itinerary: dict[str, Any]
    itinerary_id: str | None = None
