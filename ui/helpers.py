"""Helper functions for the UI - backend client calls and itinerary views."""

import os
import time
from datetime import datetime
from typing import Any

import httpx
from jose import jwt

PURPOSES = ["sightseeing", "shopping", "food", "relax", "nature", "history"]
STYLES = ["backpacker", "balanced", "luxury"]
CURRENCIES = ["USD", "EUR", "JPY", "HKD", "TWD", "GBP"]
LANGUAGES = ["en", "zh-TW", "ja", "ko"]

# Matches tripgen.db.seed_dev.DEV_ACCOUNT_ID
DEV_ACCOUNT_ID = "00000000-0000-0000-0000-000000000002"


def mint_dev_token(account_id: str = DEV_ACCOUNT_ID, secret: str | None = None) -> str:
    """Mint a short-lived bearer token the backend accepts in local development.

    Uses the same shared secret as the backend (AUTH_JWT_SECRET).
    """
    secret = secret or os.environ.get("AUTH_JWT_SECRET", "dev-secret")
    now = int(time.time())
    claims = {"sub": account_id, "aud": "authenticated", "iat": now, "exp": now + 3600}
    return str(jwt.encode(claims, secret, algorithm="HS256"))


def get_auth_header(token: str | None = None) -> dict[str, str]:
    """Get auth header for API calls, minting a dev token when none is given."""
    return {"Authorization": f"Bearer {token or mint_dev_token()}"}


def _post(backend_url: str, path: str, body: dict[str, Any], token: str | None) -> dict[str, Any]:
    response = httpx.post(
        f"{backend_url}{path}",
        json=body,
        headers=get_auth_header(token),
        timeout=120.0,  # Generation can take a while
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def call_generate_trip(
    backend_url: str, trip: dict[str, Any], token: str | None = None
) -> dict[str, Any]:
    """Call POST /generate-trip.

    Args:
        backend_url: Backend base URL (e.g. http://localhost:8000)
        trip: GenerateTripRequest body
        token: Bearer token (dev token if omitted)

    Returns:
        {"itinerary": ..., "itinerary_id": ...}

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    return _post(backend_url, "/generate-trip", trip, token)


def call_update_trip(
    backend_url: str,
    itinerary: dict[str, Any],
    itinerary_id: str | None,
    message: str,
    ui_language: str,
    currency: str,
    token: str | None = None,
) -> dict[str, Any]:
    """Call POST /update-trip with a free-text change request."""
    body = {
        "current_itinerary": itinerary,
        "itinerary_id": itinerary_id,
        "user_message": message,
        "ui_language": ui_language,
        "currency": currency,
    }
    return _post(backend_url, "/update-trip", body, token)


def call_export_trip(backend_url: str, token: str | None = None) -> dict[str, Any]:
    """Call POST /export-trip; raises on 402 when no credits remain."""
    return _post(backend_url, "/export-trip", {}, token)


def call_list_itineraries(backend_url: str, token: str | None = None) -> list[dict[str, Any]]:
    """Call GET /itineraries."""
    response = httpx.get(
        f"{backend_url}/itineraries", headers=get_auth_header(token), timeout=30.0
    )
    response.raise_for_status()
    result: list[dict[str, Any]] = response.json()
    return result


def call_get_itinerary(
    backend_url: str, itinerary_id: str, token: str | None = None
) -> dict[str, Any]:
    """Call GET /itineraries?id=..."""
    response = httpx.get(
        f"{backend_url}/itineraries",
        params={"id": itinerary_id},
        headers=get_auth_header(token),
        timeout=30.0,
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def error_message(error: Exception) -> str:
    """User-facing text for a failed backend call."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            detail = error.response.json().get("detail")
        except ValueError:
            detail = None
        return str(detail or error)
    return str(error)


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").strip())
        except ValueError:
            return 0.0
    return 0.0


def calculate_total_budget(itinerary: dict[str, Any]) -> float:
    """Sum flight, hotel and activity costs.

    Missing or non-numeric values count as 0.
    """
    flights = itinerary.get("flights") or {}
    hotel = itinerary.get("hotel") or {}

    total = _number((flights.get("outbound") or {}).get("estCostNumber"))
    total += _number((flights.get("return") or {}).get("estCostNumber"))
    total += _number(hotel.get("estCostNumber"))

    for day in itinerary.get("days") or []:
        for activity in day.get("activities") or []:
            total += _number(activity.get("costNumber"))
    return total


def format_day_heading(day: dict[str, Any], index: int) -> str:
    """'Day N - Weekday, Month DD' with the theme, falling back to the raw date."""
    raw_date = day.get("date") or ""
    try:
        display_date = datetime.fromisoformat(raw_date).strftime("%A, %B %d")
    except (ValueError, TypeError):
        display_date = raw_date
    heading = f"Day {index}"
    if display_date:
        heading += f" - {display_date}"
    if day.get("theme"):
        heading += f": {day['theme']}"
    return heading


def build_timeline_view(itinerary: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten days into display rows.

    Returns:
        One dict per day with heading and a list of activity lines
    """
    timeline = []
    for index, day in enumerate(itinerary.get("days") or [], start=1):
        lines = []
        for activity in day.get("activities") or []:
            line = f"**{activity.get('time', '')}** {activity.get('title', 'Activity')}".strip()
            if activity.get("location"):
                line += f" @ _{activity['location']}_"
            if activity.get("cost"):
                line += f" ({activity['cost']})"
            if activity.get("needsTicket") and activity.get("ticketUrl"):
                line += f" [tickets]({activity['ticketUrl']})"
            lines.append(
                {
                    "summary": line,
                    "description": activity.get("description") or "",
                    "transit": activity.get("transitToNext") or "",
                }
            )
        timeline.append({"heading": format_day_heading(day, index), "activities": lines})
    return timeline


def render_markdown_export(itinerary: dict[str, Any], currency: str) -> str:
    """Render the itinerary as a downloadable Markdown document."""
    destination = itinerary.get("destination") or "Trip"
    out = [f"# {destination}", ""]

    flights = itinerary.get("flights") or {}
    for label, key in (("Outbound", "outbound"), ("Return", "return")):
        leg = flights.get(key)
        if leg:
            out.append(
                f"- {label} flight: {leg.get('airline', '')} "
                f"{leg.get('departureTime', '')} -> {leg.get('arrivalTime', '')} "
                f"({leg.get('estCost', '')})"
            )
    hotel = itinerary.get("hotel")
    if hotel:
        out.append(f"- Hotel: {hotel.get('name', '')} ({hotel.get('estCost', '')})")
    out += ["", f"**Estimated total:** {currency} {calculate_total_budget(itinerary):,.0f}", ""]

    for day in build_timeline_view(itinerary):
        out.append(f"## {day['heading']}")
        for activity in day["activities"]:
            out.append(f"- {activity['summary']}")
            if activity["description"]:
                out.append(f"  - {activity['description']}")
        out.append("")

    advice = itinerary.get("adviceArr") or []
    if advice:
        out.append("## Advice")
        for entry in advice:
            out.append(f"### {entry.get('title', '')}")
            out.append(str(entry.get("content", "")))
            out.append("")
    return "\n".join(out)
