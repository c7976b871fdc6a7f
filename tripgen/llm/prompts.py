"""Prompt composer for itinerary generation and revision.

Pure string templating: (trip inputs, preferences, quotes, tier, language)
in, one system instruction out.
"""

import json
from dataclasses import dataclass
from typing import Any

from tripgen.config import Settings
from tripgen.llm.tiers import TierProfile
from tripgen.models.common import TravelStyle
from tripgen.models.quotes import QuoteSet
from tripgen.models.trip import GenerateTripRequest, Preferences

PROMPT_VERSION = "2026-10"

MAPS_LINK_TEMPLATE = "[Google Maps](https://www.google.com/maps/search/?api=1&query=PLACE_NAME)"

PACING_RULES = {
    TravelStyle.backpacker: (
        "Backpacker: a denser schedule is fine; prefer free or low-cost sights and public transport."
    ),
    TravelStyle.balanced: (
        "Balanced: 2-3 main sights per day with rest time in between."
    ),
    TravelStyle.luxury: (
        "Luxury: slow pace; emphasise service quality, comfort and top local experiences."
    ),
}

WEB_SEARCH_FRAGMENT = (
    "WEB SEARCH MODE: You have live web search. Use it to confirm opening hours, current "
    "ticket prices and seasonal closures for every activity before including it, and prefer "
    "venues with recent reviews."
)


@dataclass(frozen=True)
class ComposedPrompt:
    """System instruction plus the output schema it demands."""

    system: str
    output_schema: str
    version: str = PROMPT_VERSION


def language_instruction(ui_language: str | None) -> str:
    """Output-language rule: explicit UI language, otherwise infer."""
    if ui_language:
        return f"MUST output responses entirely in {ui_language}."
    return "MUST output responses in the user's inferred language based on their input."


def output_schema(currency: str, rich_activities: bool) -> str:
    """JSON template the model must fill in."""
    activity: dict[str, Any] = {
        "time": "02:00 PM",
        "title": "Activity title (e.g. Lunch at xxx)",
        "description": f"Detailed description with transport method and {MAPS_LINK_TEMPLATE}",
        "location": "Address or place name",
        "cost": f"{currency} 15",
        "costNumber": 15,
        "needsTicket": True,
        "ticketUrl": "https://www.klook.com/...",
    }
    if rich_activities:
        activity["transitToNext"] = "10 min walk / Metro line 2, 3 stops"
        activity["imageKeyword"] = "english keyword for an image search"

    def leg(departure: str, arrival: str, cost: int) -> dict[str, Any]:
        return {
            "airline": "Airline name",
            "departureTime": departure,
            "arrivalTime": arrival,
            "airportArrivalInstruction": "How to get from the airport to the hotel",
            "estCost": f"{currency} {cost}" if cost else "Included",
            "estCostNumber": cost,
            "bookingUrl": "FLIGHT_BOOKING_URL",
        }

    schema = {
        "destination": "The specific inferred city (e.g. Taipei, Taiwan)",
        "heroImageKeyword": "english keyword for a background photo",
        "flights": {
            "outbound": leg("09:00 AM", "11:00 AM", 450),
            "return": leg("05:00 PM", "07:00 PM", 0),
        },
        "hotel": {
            "name": "Recommended hotel name",
            "checkIn": "03:00 PM",
            "checkOut": "11:00 AM",
            "estCost": f"{currency} 120 / night",
            "estCostNumber": 480,
            "bookingUrl": "HOTEL_BOOKING_URL",
        },
        "adviceArr": [
            {"title": "Lodging and transport", "content": "Why this hotel area fits the budget"},
            {"title": "Route logic", "content": "How the days are grouped geographically"},
            {"title": "Packing", "content": "Clothing and packing tips for the weather"},
            {"title": "Practical info", "content": "Visas, exchange rates, plug types, etc."},
        ],
        "days": [
            {
                "date": "YYYY-MM-DD",
                "theme": "Arrival and city exploration",
                "activities": [activity],
            }
        ],
    }
    return json.dumps(schema, ensure_ascii=False, indent=2)


def _preference_lines(prefs: Preferences, currency: str) -> list[str]:
    lines = [
        f"- Travel style: {prefs.style.value}",
        f"- Getting around: {prefs.transport.value.replace('_', ' ')}",
        f"- Purposes: {', '.join(p.value for p in prefs.purposes) or 'general sightseeing'}",
        f"- Total budget: {f'{prefs.budget:g} {currency}' if prefs.budget else 'not specified'}",
    ]

    group = prefs.group
    group_desc = f"{group.adults} adult(s)"
    if group.children:
        group_desc += f", {group.children} child(ren)"
    if group.has_elders:
        group_desc += ", travelling with elderly members"
    if group.needs_accessibility:
        group_desc += ", requires step-free / accessible venues"
    lines.append(f"- Group: {group_desc}")

    if prefs.dietary_tags or prefs.dietary_notes:
        dietary = ", ".join(prefs.dietary_tags)
        if prefs.dietary_notes:
            dietary = f"{dietary}; {prefs.dietary_notes}" if dietary else prefs.dietary_notes
        lines.append(f"- Dietary requirements: {dietary}")
    if prefs.must_visit:
        lines.append(f"- Must visit: {prefs.must_visit}")
    if prefs.requests:
        lines.append(f"- Other requests: {prefs.requests}")
    return lines


def compose_generation_prompt(
    request: GenerateTripRequest,
    quotes: QuoteSet,
    profile: TierProfile,
    settings: Settings,
) -> ComposedPrompt:
    """Build the system instruction for a new itinerary."""
    prefs = request.preferences
    currency = request.currency
    purposes = ", ".join(p.value for p in prefs.purposes) or "general sightseeing"
    lodging_anchor = request.lodging or quotes.hotel.name
    schema = output_schema(currency, profile.rich_activities)

    arrival_hint = (
        f"The outbound flight lands at {request.flight_times.outbound_arrival}. "
        if request.flight_times.outbound_arrival
        else ""
    )
    departure_hint = (
        f"The return flight departs at {request.flight_times.return_departure}. "
        if request.flight_times.return_departure
        else ""
    )

    sections = [
        "You are a senior travel planner who builds itineraries that respect the client's "
        "budget, style and purposes while keeping each day logistically smooth.",
        "",
        "# User Input Data",
        f"- Destination: {request.destination} (departing from {request.origin})",
        f"- Dates: {request.dates.start.isoformat()} to {request.dates.end.isoformat()} "
        f"({request.dates.day_count} days)",
        f"- Lodging: {lodging_anchor}",
        *_preference_lines(prefs, currency),
        "",
        "# Constraints & Logic",
        f"1. BUDGET: Stay within the total budget"
        f"{f' of {prefs.budget:g} {currency}' if prefs.budget else ''}. "
        "If the budget clearly conflicts with the travel style, open the advice with an honest "
        "note and offer the closest alternative that fits.",
        f"2. PACING: {PACING_RULES[prefs.style]}",
        f"3. PURPOSES: Give priority time to activities related to [{purposes}].",
        "4. DIETARY: Dietary requirements are hard constraints; every meal suggestion must "
        "satisfy them.",
        f"5. DAY BOUNDARIES: Every day starts and ends at the lodging ({lodging_anchor}). "
        f"{arrival_hint}On the arrival day, the first activity starts no earlier than "
        f"{settings.arrival_buffer_min} minutes after landing. {departure_hint}On the "
        f"departure day, the last activity ends at least {settings.airport_buffer_min} "
        "minutes before takeoff, leaving time to reach the airport.",
        "6. DAILY STRUCTURE: Each day includes a morning activity, lunch, an afternoon "
        "activity, dinner and the lodging. Arrival and departure days include transfers and "
        "check-in/check-out with buffer time.",
        f"7. MAPS: After each place description add a link formatted as {MAPS_LINK_TEMPLATE}.",
        f"8. LANGUAGE: {language_instruction(request.ui_language)} Use emoji for readability.",
        "9. ADVICE: Give at least 3 tips about weather, transport or local customs for the "
        "destination in the advice entries.",
        "10. BOOKING LINKS (IMPORTANT): Copy these booking URLs verbatim into the "
        "designated bookingUrl fields. Do not shorten, rewrite or omit them.",
        f"    - flights.outbound.bookingUrl and flights.return.bookingUrl: {quotes.flight.booking_url}",
        f"    - hotel.bookingUrl: {quotes.hotel.booking_url}",
        "",
        "# Extra Data",
        "- heroImageKeyword must be English.",
        f"- Every cost has a string form and an integer form (estCostNumber / costNumber) in "
        f"{currency}. Free items use 0.",
        "- For activities requiring tickets (theme parks, museums) set needsTicket to true and "
        "give a ticketUrl.",
    ]
    if profile.rich_activities:
        sections.append(
            "- For every activity give transitToNext (how to reach the next activity) and an "
            "English imageKeyword."
        )
    if profile.web_search:
        sections += ["", WEB_SEARCH_FRAGMENT]

    sections += [
        "",
        "Live pricing data for these dates:",
        f"Flights: {quotes.flight.model_dump_json()}",
        f"Hotels: {quotes.hotel.model_dump_json()}",
        "",
        "# Output Format (JSON ONLY)",
        "Return a JSON object EXACTLY in this format, with no markdown formatting or backticks:",
        schema,
    ]
    return ComposedPrompt(system="\n".join(sections), output_schema=schema)


def compose_update_prompt(
    current_itinerary: dict[str, Any],
    user_message: str,
    ui_language: str | None,
    currency: str,
    profile: TierProfile,
) -> ComposedPrompt:
    """Build the system instruction for revising an existing itinerary."""
    schema = output_schema(currency, profile.rich_activities)
    root_keys = ", ".join(current_itinerary.keys())

    sections = [
        "You are a senior travel planner revising an existing itinerary for a client.",
        "",
        "The user wants to MODIFY their existing travel itinerary based on this request:",
        f'"{user_message}"',
        "",
        "CRITICAL INSTRUCTIONS:",
        f"1. LANGUAGE: {language_instruction(ui_language)} Use emoji for readability.",
        "2. SCHEMA PRESERVATION: Return the EXACT SAME JSON schema as the original itinerary "
        f"with the requested changes applied. Keep these root keys: {root_keys}.",
        "3. Do NOT remove any fields (flights, hotel, heroImageKeyword, adviceArr, costs) "
        "unless the user explicitly asks to remove them.",
        "4. MEALS: Breakfast, lunch and dinner stay explicitly scheduled unless they directly "
        "conflict with the request.",
        f"5. COSTS: New or changed activities get a string 'cost' and an integer "
        f"'costNumber' in {currency}.",
        "6. TICKETS: New activities needing a ticket get needsTicket true and a ticketUrl.",
        "7. LOGISTICS: Keep locations geographically close and each day anchored at the "
        "lodging.",
        f"8. MAPS: Add {MAPS_LINK_TEMPLATE} links for newly added places.",
        "9. BUDGET: If the change makes the budget conflict with the travel style, say so "
        "in the first advice entry.",
    ]
    if profile.web_search:
        sections += ["", WEB_SEARCH_FRAGMENT]

    sections += [
        "",
        "Here is the CURRENT itinerary JSON to modify:",
        json.dumps(current_itinerary, ensure_ascii=False),
        "",
        "Return ONLY the modified JSON object, with no markdown formatting or backticks.",
    ]
    return ComposedPrompt(system="\n".join(sections), output_schema=schema)
