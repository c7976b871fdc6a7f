"""Price quote fetcher backed by the Travelpayouts autocomplete and fares APIs.

Every step is best-effort: lookup errors are logged and treated as "no data",
and the caller always gets a QuoteSet (live, route-level or placeholder).
"""

import logging
from typing import Any

import httpx

from tripgen.config import Settings, get_settings
from tripgen.models.quotes import FlightQuote, HotelQuote, QuoteSet, QuoteSource
from tripgen.models.trip import DateRange
from tripgen.utils.metrics import metrics

logger = logging.getLogger(__name__)

AVIASALES_SEARCH_URL = "https://search.aviasales.com/flights/"
HOTELLOOK_SEARCH_URL = "https://search.hotellook.com/hotels/"

# Placeholder estimates used when no fare data is available
PLACEHOLDER_FLIGHT_COST = 450
PLACEHOLDER_HOTEL_PER_NIGHT = 120
LIVE_HOTEL_PER_NIGHT = 100


async def resolve_location_code(
    name: str, client: httpx.AsyncClient, settings: Settings
) -> str | None:
    """Resolve a free-text city name to its IATA code.

    Returns:
        The most relevant city code, or None if the lookup fails or finds nothing
    """
    params = {"term": name, "locale": "en", "types[]": "city"}
    try:
        response = await client.get(settings.travelpayouts_autocomplete_url, params=params)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Autocomplete lookup failed for {name!r}: {e}")
        return None

    if isinstance(data, list) and data:
        code = data[0].get("code") if isinstance(data[0], dict) else None
        return str(code) if code else None
    return None


async def fetch_cheapest_fare(
    origin_code: str,
    destination_code: str,
    dates: DateRange | None,
    client: httpx.AsyncClient,
    settings: Settings,
) -> dict[str, Any] | None:
    """Query the cheapest cached fare for a route.

    Args:
        origin_code: Origin IATA code
        destination_code: Destination IATA code
        dates: Exact travel dates, or None for a route-level price
        client: httpx client
        settings: Settings with API token

    Returns:
        The first fare option dict (price, airline, ...), or None if unavailable
    """
    if settings.travelpayouts_api_token is None:
        logger.info("No Travelpayouts token configured, skipping fare lookup")
        return None

    params: dict[str, str] = {
        "origin": origin_code,
        "destination": destination_code,
        "currency": settings.quote_currency,
    }
    if dates is not None:
        params["depart_date"] = dates.start.isoformat()
        params["return_date"] = dates.end.isoformat()

    try:
        response = await client.get(
            settings.travelpayouts_fares_url,
            params=params,
            headers={"x-access-token": settings.travelpayouts_api_token.get_secret_value()},
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Fare lookup failed for {origin_code}->{destination_code}: {e}")
        return None

    # Response structure: {success, data: {<dest>: {"0": {price, airline, ...}, ...}}}
    if not isinstance(data, dict) or not data.get("success"):
        return None
    options = (data.get("data") or {}).get(destination_code) or {}
    if not isinstance(options, dict):
        return None
    for option in options.values():
        if isinstance(option, dict) and option.get("price") is not None:
            return option
    return None


def flight_booking_url(
    origin_code: str, destination_code: str, dates: DateRange | None, marker: str
) -> str:
    """Aviasales affiliate search link."""
    params = {"origin_iata": origin_code, "destination_iata": destination_code}
    if dates is not None:
        params["depart_date"] = dates.start.isoformat()
        params["return_date"] = dates.end.isoformat()
    params["marker"] = marker
    return str(httpx.URL(AVIASALES_SEARCH_URL, params=params))


def hotel_booking_url(destination_code: str, dates: DateRange | None, marker: str) -> str:
    """Hotellook affiliate search link."""
    params = {"destination": destination_code}
    if dates is not None:
        params["checkIn"] = dates.start.isoformat()
        params["checkOut"] = dates.end.isoformat()
    params["marker"] = marker
    return str(httpx.URL(HOTELLOOK_SEARCH_URL, params=params))


def placeholder_quotes(origin_code: str, destination_code: str, settings: Settings) -> QuoteSet:
    """Fixed quote pair used when no fare data could be fetched."""
    return QuoteSet(
        flight=FlightQuote(
            outbound=f"Flight {origin_code} -> {destination_code}",
            return_=f"Flight {destination_code} -> {origin_code}",
            est_cost=PLACEHOLDER_FLIGHT_COST,
            currency=settings.quote_currency,
            booking_url=flight_booking_url(
                origin_code, destination_code, None, settings.travelpayouts_marker
            ),
        ),
        hotel=HotelQuote(
            name=f"Grand Central {destination_code}",
            est_cost_per_night=PLACEHOLDER_HOTEL_PER_NIGHT,
            currency=settings.quote_currency,
            booking_url=hotel_booking_url(destination_code, None, settings.travelpayouts_marker),
        ),
        source=QuoteSource.placeholder,
        origin_code=origin_code,
        destination_code=destination_code,
    )


def _quotes_from_fare(
    fare: dict[str, Any],
    origin_code: str,
    destination_code: str,
    dates: DateRange,
    source: QuoteSource,
    settings: Settings,
) -> QuoteSet:
    airline = fare.get("airline")
    return QuoteSet(
        flight=FlightQuote(
            outbound=f"Flight from {origin_code} to {destination_code} (Airline: {airline})",
            return_=f"Return from {destination_code} to {origin_code}",
            airline=airline,
            est_cost=float(fare["price"]),
            currency=settings.quote_currency,
            booking_url=flight_booking_url(
                origin_code, destination_code, dates, settings.travelpayouts_marker
            ),
        ),
        hotel=HotelQuote(
            name=f"Recommended Hotel near {destination_code}",
            est_cost_per_night=LIVE_HOTEL_PER_NIGHT,
            currency=settings.quote_currency,
            booking_url=hotel_booking_url(destination_code, dates, settings.travelpayouts_marker),
        ),
        source=source,
        origin_code=origin_code,
        destination_code=destination_code,
    )


async def fetch_quotes(
    origin: str,
    destination: str,
    dates: DateRange,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> QuoteSet:
    """Fetch a flight/hotel quote pair for a trip.

    Resolves both names to IATA codes (falling back to the raw input), asks
    for the exact-date fare, retries once without dates, and falls back to a
    placeholder pair. The calls are sequential.

    Args:
        origin: Free-text origin
        destination: Free-text destination
        dates: Travel dates
        client: Optional httpx client (for testing with mocks)
        settings: Optional settings override

    Returns:
        QuoteSet; never raises
    """
    settings = settings or get_settings()

    close_client = False
    if client is None:
        client = httpx.AsyncClient()
        close_client = True

    origin_code, destination_code = origin, destination
    try:
        origin_code = await resolve_location_code(origin, client, settings) or origin
        destination_code = await resolve_location_code(destination, client, settings) or destination

        fare = await fetch_cheapest_fare(origin_code, destination_code, dates, client, settings)
        source = QuoteSource.live
        if fare is None:
            fare = await fetch_cheapest_fare(origin_code, destination_code, None, client, settings)
            source = QuoteSource.route

        if fare is not None:
            quotes = _quotes_from_fare(fare, origin_code, destination_code, dates, source, settings)
        else:
            quotes = placeholder_quotes(origin_code, destination_code, settings)
    except Exception as e:
        logger.warning(f"Quote lookup failed, using placeholder: {e}")
        quotes = placeholder_quotes(origin_code, destination_code, settings)
    finally:
        if close_client:
            await client.aclose()

    metrics.inc_quote_lookup(quotes.source.value)
    return quotes
