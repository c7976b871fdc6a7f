"""Unit tests for UI helper functions."""

import uuid

import httpx
from jose import jwt

from support import sample_itinerary
from ui.helpers import (
    build_timeline_view,
    calculate_total_budget,
    error_message,
    get_auth_header,
    mint_dev_token,
    render_markdown_export,
)


def test_total_budget_sums_flights_hotel_and_activities() -> None:
    # 420 + 0 (flights) + 300 (hotel) + 0 + 30 + 0 + 25 + 15 (activities)
    assert calculate_total_budget(sample_itinerary()) == 790


def test_total_budget_treats_missing_and_non_numeric_as_zero() -> None:
    itinerary = sample_itinerary()
    itinerary["flights"]["return"].pop("estCostNumber")
    itinerary["hotel"]["estCostNumber"] = "about 300"
    itinerary["days"][0]["activities"][1]["costNumber"] = None
    del itinerary["days"][2]["activities"][0]["costNumber"]

    assert calculate_total_budget(itinerary) == 420 + 25


def test_total_budget_of_empty_itinerary() -> None:
    assert calculate_total_budget({}) == 0
    assert calculate_total_budget({"flights": None, "hotel": None, "days": None}) == 0


def test_timeline_view_headings_and_ticket_links() -> None:
    timeline = build_timeline_view(sample_itinerary())

    assert len(timeline) == 3
    assert timeline[0]["heading"] == "Day 1 - Sunday, November 01: Arrival"
    evening = timeline[1]["activities"][1]["summary"]
    assert "Evening at Shibuya Sky" in evening
    assert "[tickets](https://www.klook.com/shibuya-sky)" in evening


def test_timeline_view_keeps_unparseable_dates() -> None:
    itinerary = {"days": [{"date": "Day one", "activities": []}]}

    assert build_timeline_view(itinerary)[0]["heading"] == "Day 1 - Day one"


def test_markdown_export_contains_itinerary_sections() -> None:
    document = render_markdown_export(sample_itinerary(), "USD")

    assert document.startswith("# Tokyo, Japan")
    assert "**Estimated total:** USD 790" in document
    assert "- Hotel: Recommended Hotel near TYO" in document
    assert "## Day 2 - Monday, November 02: Temples" in document
    assert "## Advice" in document
    assert "### Customs" in document


def test_dev_token_names_account() -> None:
    account_id = str(uuid.uuid4())
    token = mint_dev_token(account_id, secret="s3cret")

    claims = jwt.decode(token, "s3cret", algorithms=["HS256"], audience="authenticated")
    assert claims["sub"] == account_id
    assert get_auth_header(token) == {"Authorization": f"Bearer {token}"}


def test_error_message_prefers_backend_detail() -> None:
    request = httpx.Request("POST", "http://localhost:8000/generate-trip")
    response = httpx.Response(402, json={"detail": "Please top up."}, request=request)
    error = httpx.HTTPStatusError("402", request=request, response=response)

    assert error_message(error) == "Please top up."
    assert error_message(RuntimeError("boom")) == "boom"
