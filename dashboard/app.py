"""Streamlit booking dashboard: calendar, smart suggestions, requests and assistant."""

from __future__ import annotations

import datetime
import os
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st

# ==========================================
# Configuration & Constants
# ==========================================
API_BASE_URL = os.getenv("BOOKING_API_URL", "http://127.0.0.1:8000/api")

DENSITY_BADGES = {"none": "⚪", "low": "🟢", "medium": "🟡", "high": "🔴"}

st.set_page_config(
    page_title="Room Booking",
    page_icon="📅",
    layout="wide",
)


# ==========================================
# API Helper Functions
# ==========================================
def _auth_headers() -> Dict[str, str]:
    token = st.session_state.get("token")
    return {"Authorization": f"Bearer {token}"} if token else {}


def _call(method: str, path: str, **kwargs: Any) -> Optional[Any]:
    try:
        response = requests.request(
            method,
            f"{API_BASE_URL}{path}",
            headers=_auth_headers(),
            timeout=10,
            **kwargs,
        )
        response.raise_for_status()
        if response.status_code == 204:
            return {}
        return response.json()
    except requests.exceptions.HTTPError as e:
        detail = e.response.json().get("detail", str(e)) if e.response is not None else str(e)
        st.error(f"Request failed: {detail}")
        return None
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None


def login(username: str, password: str) -> bool:
    result = _call("POST", "/auth", json={"action": "login", "username": username, "password": password})
    if not result:
        return False
    st.session_state["token"] = result["token"]
    st.session_state["user"] = result["user"]
    return True


def fetch_rooms() -> List[Dict[str, Any]]:
    return _call("GET", "/rooms") or []


def fetch_availability(room_id: str, target_date: datetime.date) -> Optional[Dict[str, Any]]:
    return _call("GET", f"/rooms/{room_id}/availability", params={"date": target_date.isoformat()})


def fetch_outlook(room_id: str, target_date: datetime.date) -> Optional[Dict[str, Any]]:
    return _call("GET", f"/rooms/{room_id}/outlook", params={"date": target_date.isoformat()})


def fetch_bookings(filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    result = _call("POST", "/bookings", json={"action": "fetch", "filters": filters})
    return (result or {}).get("bookings", [])


# ==========================================
# UI Page Functions
# ==========================================
def render_calendar_page(rooms: List[Dict[str, Any]]) -> None:
    st.header("📅 Room Calendar")
    st.markdown("Approved bookings block a slot; pending requests do not.")

    col1, col2 = st.columns(2)
    with col1:
        room = st.selectbox("Room", rooms, format_func=lambda item: item["name"])
    with col2:
        target_date = st.date_input("Week starting", datetime.date.today())

    if not room:
        return

    outlook = fetch_outlook(room["id"], target_date)
    if outlook:
        metric_col1, metric_col2 = st.columns(2)
        metric_col1.metric("Average Utilization", f"{outlook['averageUtilization']}%")
        metric_col2.metric("Busy Days", outlook["busyDays"])
        for insight in outlook["insights"]:
            st.info(insight)
        week = pd.DataFrame(outlook["days"])
        week["badge"] = week["level"].map(DENSITY_BADGES)
        st.dataframe(week[["date", "badge", "level", "bookedSlots", "totalSlots"]], use_container_width=True)

    availability = fetch_availability(room["id"], target_date)
    if availability:
        st.write(f"### Slots on {availability['date']}")
        slots = pd.DataFrame(availability["slots"])
        st.dataframe(slots[["startTime", "endTime", "available"]], use_container_width=True)


def render_suggestion_page() -> None:
    st.header("✨ Smart Booking")
    st.markdown("Describe the event and the assistant ranks rooms by fit.")

    col1, col2 = st.columns(2)
    with col1:
        meeting_type = st.text_input("Event type", "Team presentation")
        purpose = st.text_area("Purpose", "Quarterly review with slides")
    with col2:
        attendees = st.number_input("Attendees", min_value=1, max_value=500, value=40)

    if st.button("Suggest Rooms", type="primary"):
        with st.spinner("Scoring rooms..."):
            result = _call(
                "POST",
                "/ai/room-suggestions",
                json={"meetingType": meeting_type, "attendees": int(attendees), "purpose": purpose},
            )
        if result:
            suggestions = result.get("suggestions", [])
            if suggestions:
                st.dataframe(
                    pd.DataFrame(suggestions)[["roomName", "score", "fit", "reason"]],
                    use_container_width=True,
                )
            else:
                st.info("No rooms available to suggest.")


def render_booking_page(rooms: List[Dict[str, Any]]) -> None:
    st.header("📝 Booking Requests")

    with st.form("booking-form"):
        col1, col2 = st.columns(2)
        with col1:
            room = st.selectbox("Room", rooms, format_func=lambda item: item["name"])
            target_date = st.date_input("Date", datetime.date.today())
            time_slot = st.selectbox("Time Slot", [str(index) for index in range(1, 8)])
            attendees = st.number_input("Attendees", min_value=1, max_value=500, value=10)
        with col2:
            name = st.text_input("Your name")
            email = st.text_input("Email")
            purpose = st.text_input("Purpose")
            notes = st.text_area("Notes")
        submitted = st.form_submit_button("Submit Request", type="primary")

    if submitted and room:
        result = _call(
            "POST",
            "/bookings",
            json={
                "action": "create",
                "booking": {
                    "roomId": room["id"],
                    "date": datetime.datetime.combine(target_date, datetime.time(12)).isoformat(),
                    "timeSlot": time_slot,
                    "requesterName": name,
                    "requesterEmail": email,
                    "purpose": purpose,
                    "attendees": int(attendees),
                    "notes": notes or None,
                },
            },
        )
        if result:
            st.success(f"Request submitted; status: {result['booking']['status']}")

    bookings = fetch_bookings()
    if not bookings:
        st.info("No booking requests yet.")
        return

    df = pd.DataFrame(bookings)
    df["slot"] = df["timeSlot"].map(lambda slot: f"{slot['startTime']} - {slot['endTime']}")
    st.dataframe(
        df[["id", "roomId", "date", "slot", "requesterName", "attendees", "status"]],
        use_container_width=True,
    )

    pending = [item["id"] for item in bookings if item["status"] == "pending"]
    if pending:
        st.write("### Review")
        booking_id = st.selectbox("Pending request", pending)
        approve_col, reject_col = st.columns(2)
        if approve_col.button("Approve"):
            if _call("POST", f"/bookings/{booking_id}/approve"):
                st.success("Booking approved")
        if reject_col.button("Reject"):
            if _call("POST", f"/bookings/{booking_id}/reject"):
                st.warning("Booking rejected")


def render_assistant_page(rooms: List[Dict[str, Any]]) -> None:
    st.header("💬 Booking Assistant")

    history: List[Dict[str, str]] = st.session_state.setdefault("chat_history", [])
    for message in history:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])

    prompt = st.chat_input("Ask about rooms, pricing or policies")
    if prompt:
        history.append({"role": "user", "content": prompt})
        result = _call("POST", "/ai/chat", json={"message": prompt, "history": history[:-1]})
        reply = (result or {}).get("reply", "Sorry, I could not answer that right now.")
        history.append({"role": "assistant", "content": reply})
        st.rerun()

    if rooms:
        st.sidebar.markdown("---")
        room = st.sidebar.selectbox("Forecast room", rooms, format_func=lambda item: item["name"])
        forecast = _call("POST", "/ai/forecast", json={"roomId": room["id"]})
        if forecast:
            st.sidebar.metric("Upcoming (7 days)", forecast["upcomingBookings"])
            st.sidebar.metric("Occupancy", f"{forecast['occupancyRate']}%")
            st.sidebar.caption(f"Peak: {forecast['peakTime']} · {forecast['trend']}")


def render_login() -> None:
    st.header("🔐 Sign in")
    with st.form("login-form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Sign in", type="primary"):
            if login(username, password):
                st.rerun()


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Room Booking")
    st.sidebar.markdown("---")

    if "token" not in st.session_state:
        render_login()
        return

    st.sidebar.caption(f"Signed in as {st.session_state['user']['name']}")
    page = st.sidebar.radio(
        "Navigation Module",
        ["Calendar", "Smart Booking", "Requests", "Assistant"],
    )

    rooms = fetch_rooms()
    if page == "Calendar":
        render_calendar_page(rooms)
    elif page == "Smart Booking":
        render_suggestion_page()
    elif page == "Requests":
        render_booking_page(rooms)
    else:
        render_assistant_page(rooms)


if __name__ == "__main__":
    main()
