"""Itinerary models - the structured output returned by the model."""

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _lenient_number(v: Any) -> Any:
    """Models sometimes write "Free" or "~15" into numeric cost fields; treat those as unknown."""
    if v is None or isinstance(v, (int, float)):
        return v
    try:
        number = float(str(v).replace(",", "").strip())
    except ValueError:
        return None
    return int(number) if number.is_integer() else number


def _lenient_text(v: Any) -> Any:
    """Accept numbers where free text is expected (e.g. "cost": 15)."""
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return v


LenientNumber = Annotated[int | float | None, BeforeValidator(_lenient_number)]
LenientText = Annotated[str | None, BeforeValidator(_lenient_text)]


class _Payload(BaseModel):
    """Base for model-produced objects: camelCase on the wire, unknown keys kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Activity(_Payload):
    """Single activity in a day."""

    time: LenientText = None
    title: LenientText = None
    description: LenientText = None
    location: LenientText = None
    cost: LenientText = None
    cost_number: LenientNumber = Field(None, alias="costNumber")
    needs_ticket: bool = Field(False, alias="needsTicket")
    ticket_url: LenientText = Field(None, alias="ticketUrl")
    transit_to_next: LenientText = Field(None, alias="transitToNext")
    image_keyword: LenientText = Field(None, alias="imageKeyword")


class Day(_Payload):
    """Itinerary for a single day."""

    date: LenientText = None
    theme: LenientText = None
    activities: list[Activity] = Field(default_factory=list)


class FlightLeg(_Payload):
    """One flight direction."""

    airline: LenientText = None
    departure_time: LenientText = Field(None, alias="departureTime")
    arrival_time: LenientText = Field(None, alias="arrivalTime")
    airport_arrival_instruction: LenientText = Field(None, alias="airportArrivalInstruction")
    est_cost: LenientText = Field(None, alias="estCost")
    est_cost_number: LenientNumber = Field(None, alias="estCostNumber")
    booking_url: LenientText = Field(None, alias="bookingUrl")


class Flights(_Payload):
    """Outbound and return legs."""

    outbound: FlightLeg | None = None
    return_: FlightLeg | None = Field(None, alias="return")


class Hotel(_Payload):
    """Lodging recommendation."""

    name: LenientText = None
    check_in: LenientText = Field(None, alias="checkIn")
    check_out: LenientText = Field(None, alias="checkOut")
    est_cost: LenientText = Field(None, alias="estCost")
    est_cost_number: LenientNumber = Field(None, alias="estCostNumber")
    booking_url: LenientText = Field(None, alias="bookingUrl")


class Advice(_Payload):
    """Advisory entry."""

    title: LenientText = None
    content: LenientText = None


class ItineraryPayload(_Payload):
    """Complete itinerary structure as produced by the model."""

    destination: str
    hero_image_keyword: LenientText = Field(None, alias="heroImageKeyword")
    flights: Flights | None = None
    hotel: Hotel | None = None
    advice: list[Advice] = Field(default_factory=list, alias="adviceArr")
    days: list[Day]

    def to_wire(self) -> dict[str, Any]:
        """Serialize back to the camelCase JSON shape, keeping only keys that were present."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def date_span(self) -> tuple[date | None, date | None]:
        """First and last parsable day dates."""
        parsed: list[date] = []
        for day in self.days:
            if not day.date:
                continue
            try:
                parsed.append(date.fromisoformat(day.date))
            except ValueError:
                continue
        if not parsed:
            return (None, None)
        return (parsed[0], parsed[-1])


class ItinerarySummary(BaseModel):
    """Listing row for GET /itineraries."""

    id: str
    title: str
    destination: str
    start_date: date
    end_date: date
    created_at: datetime
    parent_id: str | None = None


class ItineraryDetail(ItinerarySummary):
    """Full row for GET /itineraries?id=..."""

    itinerary_data: dict[str, Any]
    preferences: dict[str, Any]
