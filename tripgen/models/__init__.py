"""Pydantic models for trip requests, quotes and itineraries."""

from tripgen.models.common import Purpose, Tier, TransportMode, TravelStyle
from tripgen.models.itinerary import (
    Activity,
    Advice,
    Day,
    FlightLeg,
    Flights,
    Hotel,
    ItineraryDetail,
    ItineraryPayload,
    ItinerarySummary,
)
from tripgen.models.quotes import FlightQuote, HotelQuote, QuoteSet, QuoteSource
from tripgen.models.trip import (
    DateRange,
    FlightTimes,
    GenerateTripRequest,
    GroupComposition,
    Preferences,
    TripResponse,
    UpdateTripRequest,
)

__all__ = [
    # Common
    "Purpose",
    "Tier",
    "TransportMode",
    "TravelStyle",
    # Trip input
    "DateRange",
    "FlightTimes",
    "GenerateTripRequest",
    "GroupComposition",
    "Preferences",
    "TripResponse",
    "UpdateTripRequest",
    # Quotes
    "FlightQuote",
    "HotelQuote",
    "QuoteSet",
    "QuoteSource",
    # Itinerary
    "Activity",
    "Advice",
    "Day",
    "FlightLeg",
    "Flights",
    "Hotel",
    "ItineraryDetail",
    "ItineraryPayload",
    "ItinerarySummary",
]
