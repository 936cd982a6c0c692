"""
Clinician Review Interface.

GOVERNANCE:
- Every booking carries a voice analysis that a clinician reviews
- Voice analysis scores are mock values, NOT a diagnosis
- Clinician name recorded with every status change
"""

from datetime import datetime

import httpx
import streamlit as st

from config import get_settings

# Configuration
settings = get_settings()
API_BASE_URL = settings.api_base_url

STATUS_ACTIONS = {
    "confirmed": "Confirm",
    "completed": "Mark Completed",
    "cancelled": "Cancel Booking",
}

st.set_page_config(
    page_title="Clinician Review - NeuroCare AI",
    page_icon="",
    layout="wide",
)


def init_session_state():
    """Initialize session state variables."""
    if "token" not in st.session_state:
        st.session_state.token = settings.demo_doctor_token
    if "selected_booking" not in st.session_state:
        st.session_state.selected_booking = None
    if "bookings" not in st.session_state:
        st.session_state.bookings = []
    if "status_filter" not in st.session_state:
        st.session_state.status_filter = "pending"
    if "counts" not in st.session_state:
        st.session_state.counts = {}
    if "error_message" not in st.session_state:
        st.session_state.error_message = None
    if "success_message" not in st.session_state:
        st.session_state.success_message = None


def auth_headers() -> dict:
    return {"Authorization": f"Bearer {st.session_state.token}"}


def fetch_bookings():
    """Fetch bookings for the selected status."""
    params = {}
    if st.session_state.status_filter != "all":
        params["status"] = st.session_state.status_filter
    try:
        response = httpx.get(
            f"{API_BASE_URL}/v1/bookings",
            params=params,
            headers=auth_headers(),
            timeout=30.0,
        )
        response.raise_for_status()
        st.session_state.bookings = response.json()

        counts = httpx.get(
            f"{API_BASE_URL}/v1/bookings/stats/counts",
            headers=auth_headers(),
            timeout=30.0,
        )
        counts.raise_for_status()
        st.session_state.counts = counts.json()
        return True
    except httpx.HTTPError as e:
        st.session_state.error_message = f"Failed to fetch bookings: {e}"
        return False


def fetch_booking_detail(booking_id: str):
    """Fetch one booking with its voice analysis."""
    try:
        response = httpx.get(
            f"{API_BASE_URL}/v1/bookings/{booking_id}",
            headers=auth_headers(),
            timeout=30.0,
        )
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as e:
        st.session_state.error_message = f"Failed to fetch booking details: {e}"
        return None


def update_status(booking_id: str, status: str, notes: str) -> bool:
    """Change a booking's status."""
    try:
        response = httpx.post(
            f"{API_BASE_URL}/v1/bookings/{booking_id}/status",
            json={"status": status, "notes": notes or None},
            headers=auth_headers(),
            timeout=30.0,
        )
        response.raise_for_status()
        return True
    except httpx.HTTPError as e:
        st.session_state.error_message = f"Failed to update booking: {e}"
        return False


def render_dashboard():
    """Render the main dashboard."""
    st.title("Clinician Dashboard")
    st.caption("Manage your patients and review AI-powered cognitive assessments")

    col1, col2 = st.columns([2, 1])
    with col1:
        status_filter = st.selectbox(
            "Show",
            ["pending", "confirmed", "completed", "cancelled", "all"],
            index=["pending", "confirmed", "completed", "cancelled", "all"].index(
                st.session_state.status_filter
            ),
        )
        if status_filter != st.session_state.status_filter:
            st.session_state.status_filter = status_filter
            fetch_bookings()
            st.rerun()

    with col2:
        if st.button("Refresh", use_container_width=True):
            fetch_bookings()

    st.markdown("---")

    counts = st.session_state.counts
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Pending", counts.get("pending", 0))
    with col2:
        st.metric("Confirmed", counts.get("confirmed", 0))
    with col3:
        st.metric("Completed", counts.get("completed", 0))
    with col4:
        st.metric("Cancelled", counts.get("cancelled", 0))

    st.markdown("---")

    if not st.session_state.bookings:
        st.info("No bookings to show. Click 'Refresh' to check for new bookings.")
        return

    st.subheader("Bookings")

    for booking in st.session_state.bookings:
        appointment = booking["submission"]["appointment"]
        analysis = booking["submission"]["voice_analysis"]
        with st.container():
            col1, col2, col3, col4 = st.columns([2, 2, 2, 1])
            with col1:
                st.write(f"**Patient:** {booking['submission']['patient_name']}")
            with col2:
                st.write(f"**When:** {appointment['date']} {appointment['time']}")
            with col3:
                st.write(f"**Cognitive Load:** {analysis['cognitive_load_level']}")
            with col4:
                if st.button("Review", key=f"review_{booking['booking_id']}"):
                    st.session_state.selected_booking = booking["booking_id"]
                    st.rerun()

            st.markdown("---")


def render_review():
    """Render the review screen for a selected booking."""
    booking_id = st.session_state.selected_booking
    booking = fetch_booking_detail(booking_id)

    if not booking:
        st.error("Failed to load booking details.")
        if st.button("Back to Dashboard"):
            st.session_state.selected_booking = None
            st.rerun()
        return

    submission = booking["submission"]
    appointment = submission["appointment"]
    analysis = submission["voice_analysis"]

    col1, col2 = st.columns([3, 1])
    with col1:
        st.title("Booking Review")
        st.caption(f"Status: {booking['status'].upper()}")
    with col2:
        if st.button("Back to Bookings"):
            st.session_state.selected_booking = None
            st.rerun()

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        st.write(f"**Patient:** {submission['patient_name']} ({submission['patient_id']})")
        st.write(f"**Doctor:** {booking.get('doctor_name') or appointment['doctor_id']}")
        st.write(f"**Reason:** {appointment['reason']}")
    with col2:
        st.write(f"**Date:** {appointment['date']} at {appointment['time']}")
        created_at = booking.get("created_at", "")
        if created_at:
            dt = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
            st.write(f"**Requested:** {dt.strftime('%Y-%m-%d %H:%M')}")

    if appointment.get("symptoms"):
        st.write(f"**Symptoms:** {appointment['symptoms']}")
    if appointment.get("medical_history"):
        st.write(f"**Medical History:** {appointment['medical_history']}")

    st.markdown("---")

    st.subheader("Voice Analysis")
    st.caption("GOVERNANCE: Mock scores for demonstration. Not a diagnosis.")
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Duration", f"{analysis['duration_seconds']}s")
    with col2:
        st.metric("Speech Rate", f"{analysis['speech_rate_wpm']} wpm")
    with col3:
        st.metric("Clarity", f"{analysis['clarity_score_pct']}%")
    with col4:
        st.metric("Confidence", f"{analysis['confidence_level_pct']}%")

    st.write(f"**Cognitive Load:** {analysis['cognitive_load_level']}")
    st.write(f"**Risk Assessment:** {analysis['risk_assessment']}")
    st.write(f"**Transcript:** {analysis['transcript']}")
    for item in analysis.get("recommendations", []):
        st.write(f"- {item}")

    st.markdown("---")

    if booking.get("clinician_notes"):
        st.info(f"**Notes ({booking.get('updated_by')}):** {booking['clinician_notes']}")

    if booking["status"] in ("completed", "cancelled"):
        st.caption("This booking is final.")
        return

    st.subheader("Update Status")
    with st.form("status_form"):
        status = st.radio(
            "New status",
            options=list(STATUS_ACTIONS),
            format_func=lambda value: STATUS_ACTIONS[value],
            horizontal=True,
        )
        notes = st.text_area("Clinician Notes (optional):", height=100)

        submitted = st.form_submit_button("Save", type="primary")

        if submitted and update_status(booking_id, status, notes):
            st.session_state.success_message = f"Booking status set to {status.upper()}"
            st.session_state.selected_booking = None
            fetch_bookings()
            st.rerun()


def main():
    """Main application entry point."""
    init_session_state()

    # Show messages
    if st.session_state.error_message:
        st.error(st.session_state.error_message)
        st.session_state.error_message = None

    if st.session_state.success_message:
        st.success(st.session_state.success_message)
        st.session_state.success_message = None

    # Initial fetch
    if not st.session_state.bookings and not st.session_state.counts:
        fetch_bookings()

    # Route to appropriate screen
    if st.session_state.selected_booking:
        render_review()
    else:
        render_dashboard()


if __name__ == "__main__":
    main()
