"""Streamlit UI for the trip generator.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import os  # noqa: E402
from datetime import date, timedelta  # noqa: E402

import streamlit as st  # noqa: E402

from ui.helpers import (  # noqa: E402
    CURRENCIES,
    LANGUAGES,
    PURPOSES,
    STYLES,
    build_timeline_view,
    calculate_total_budget,
    call_export_trip,
    call_generate_trip,
    call_get_itinerary,
    call_list_itineraries,
    call_update_trip,
    error_message,
    render_markdown_export,
)

# Configuration
BACKEND_URL = os.environ.get("TRIPGEN_BACKEND_URL", "http://localhost:8000")

# Page config
st.set_page_config(page_title="Trip Generator", page_icon="✈️", layout="wide")

# Initialize session state
for key, default in (
    ("itinerary", None),
    ("itinerary_id", None),
    ("error", None),
    ("currency", "USD"),
    ("language", "en"),
    ("export_doc", None),
):
    if key not in st.session_state:
        st.session_state[key] = default


def _show_result(result: dict) -> None:
    st.session_state.itinerary = result.get("itinerary")
    st.session_state.itinerary_id = result.get("itinerary_id")
    st.session_state.error = None
    st.session_state.export_doc = None


st.title("✈️ Trip Generator")
st.divider()

col_left, col_center, col_right = st.columns([1, 2, 1.2])

# =============================================================================
# LEFT COLUMN - TRIP FORM
# =============================================================================
with col_left:
    st.subheader("📋 Plan a trip")

    with st.form("trip_form"):
        origin = st.text_input("From *", value="Hong Kong")
        destination = st.text_input("To *", value="Tokyo")

        col_date1, col_date2 = st.columns(2)
        with col_date1:
            start_date = st.date_input("Start *", value=date.today() + timedelta(days=30))
        with col_date2:
            end_date = st.date_input("End *", value=date.today() + timedelta(days=32))

        col_t1, col_t2 = st.columns(2)
        with col_t1:
            arrival = st.text_input("Outbound lands at", placeholder="14:30")
        with col_t2:
            departure = st.text_input("Return departs at", placeholder="18:00")

        lodging = st.text_input("Staying at (optional)")
        style = st.selectbox("Style", options=STYLES, index=1)
        purposes = st.multiselect("Purposes (up to 3)", options=PURPOSES, max_selections=3)
        budget = st.number_input("Total budget (0 = no limit)", min_value=0, value=0, step=100)
        currency = st.selectbox("Currency", options=CURRENCIES)
        language = st.selectbox("Language", options=LANGUAGES)
        dietary = st.text_input("Dietary notes")
        must_visit = st.text_input("Must visit")
        requests = st.text_area("Other requests")

        submitted = st.form_submit_button("🚀 Generate", type="primary", use_container_width=True)

    if submitted:
        errors = []
        if not origin.strip():
            errors.append("Origin is required")
        if not destination.strip():
            errors.append("Destination is required")
        if end_date < start_date:
            errors.append("End date must be after start date")

        if errors:
            st.session_state.error = " | ".join(errors)
        else:
            trip = {
                "origin": origin.strip(),
                "destination": destination.strip(),
                "dates": {"start": start_date.isoformat(), "end": end_date.isoformat()},
                "flight_times": {
                    "outbound_arrival": arrival or None,
                    "return_departure": departure or None,
                },
                "lodging": lodging or None,
                "preferences": {
                    "style": style,
                    "purposes": purposes,
                    "budget": budget or None,
                    "dietary_notes": dietary,
                    "must_visit": must_visit,
                    "requests": requests,
                },
                "currency": currency,
                "ui_language": language,
            }
            st.session_state.currency = currency
            st.session_state.language = language
            with st.spinner("⏳ Building your itinerary..."):
                try:
                    _show_result(call_generate_trip(BACKEND_URL, trip))
                except Exception as e:
                    st.session_state.error = error_message(e)

    if st.session_state.error:
        st.error(f"❌ {st.session_state.error}")

# =============================================================================
# CENTER COLUMN - ITINERARY
# =============================================================================
with col_center:
    st.subheader("🗺️ Your itinerary")
    itinerary = st.session_state.itinerary

    if itinerary:
        st.markdown(f"## {itinerary.get('destination', '')}")
        st.caption(
            f"**Estimated total:** {st.session_state.currency} "
            f"{calculate_total_budget(itinerary):,.0f}"
        )

        flights = itinerary.get("flights") or {}
        hotel = itinerary.get("hotel") or {}
        card1, card2 = st.columns(2)
        with card1:
            for label, key in (("🛫 Outbound", "outbound"), ("🛬 Return", "return")):
                leg = flights.get(key)
                if leg:
                    st.markdown(
                        f"**{label}** {leg.get('airline', '')}  \n"
                        f"{leg.get('departureTime', '')} → {leg.get('arrivalTime', '')} · "
                        f"{leg.get('estCost', '')}"
                    )
                    if leg.get("bookingUrl"):
                        st.link_button("Book flight", leg["bookingUrl"])
        with card2:
            if hotel:
                st.markdown(f"**🏨 {hotel.get('name', '')}**  \n{hotel.get('estCost', '')}")
                if hotel.get("bookingUrl"):
                    st.link_button("Book hotel", hotel["bookingUrl"])

        st.divider()
        for day in build_timeline_view(itinerary):
            st.markdown(f"#### {day['heading']}")
            for activity in day["activities"]:
                st.markdown(f"- {activity['summary']}")
                if activity["description"]:
                    st.caption(activity["description"])
                if activity["transit"]:
                    st.caption(f"🚶 {activity['transit']}")

        st.divider()
        for entry in itinerary.get("adviceArr") or []:
            with st.expander(f"💡 {entry.get('title', 'Advice')}"):
                st.markdown(str(entry.get("content", "")))

        # Modification chat
        message = st.chat_input("Ask for a change, e.g. 'remove all evening activities'")
        if message:
            with st.spinner("✏️ Updating..."):
                try:
                    _show_result(
                        call_update_trip(
                            BACKEND_URL,
                            itinerary,
                            st.session_state.itinerary_id,
                            message,
                            st.session_state.language,
                            st.session_state.currency,
                        )
                    )
                    st.rerun()
                except Exception as e:
                    st.error(f"❌ {error_message(e)}")

        if st.button("📤 Export"):
            try:
                result = call_export_trip(BACKEND_URL)
                st.success(result.get("message", "Export ready"))
                st.session_state.export_doc = render_markdown_export(
                    itinerary, st.session_state.currency
                )
            except Exception as e:
                st.error(f"❌ {error_message(e)}")

        if st.session_state.export_doc:
            st.download_button(
                "⬇️ Download itinerary",
                data=st.session_state.export_doc,
                file_name=f"{itinerary.get('destination', 'trip')}.md",
                mime="text/markdown",
            )
    else:
        st.info("👈 Fill in the form to generate an itinerary.")

# =============================================================================
# RIGHT COLUMN - MY TRIPS
# =============================================================================
with col_right:
    st.subheader("🧳 My trips")
    try:
        trips = call_list_itineraries(BACKEND_URL)
    except Exception as e:
        trips = []
        st.caption(f"Could not load trips: {error_message(e)}")

    for trip in trips:
        label = f"{trip['title']} ({trip['start_date']} → {trip['end_date']})"
        if trip.get("parent_id"):
            label = f"↳ {label}"
        if st.button(label, key=f"trip-{trip['id']}"):
            try:
                detail = call_get_itinerary(BACKEND_URL, trip["id"])
                _show_result({"itinerary": detail["itinerary_data"], "itinerary_id": detail["id"]})
                st.rerun()
            except Exception as e:
                st.error(f"❌ {error_message(e)}")
