"""
Patient Portal.

The booking wizard is reachable three ways: a standalone page, a dashboard
tab and a quick-book dialog. All three render the same wizard view; each
keeps its own workflow.

GOVERNANCE:
- NO booking without a completed voice analysis
- Voice analysis is informational; a clinician reviews every booking
"""

import streamlit as st

from config import get_settings
from patient_portal.client import ApiError, BookingApiClient
from patient_portal.wizard_view import render_booking_wizard

settings = get_settings()

st.set_page_config(
    page_title="NeuroCare AI - Patient Portal",
    page_icon="",
    layout="wide",
)


def init_session_state():
    """Initialize session state variables."""
    if "token" not in st.session_state:
        st.session_state.token = settings.demo_patient_token
    if "page" not in st.session_state:
        st.session_state.page = "Dashboard"
    if "error_message" not in st.session_state:
        st.session_state.error_message = None
    if "success_message" not in st.session_state:
        st.session_state.success_message = None


def get_client() -> BookingApiClient:
    return BookingApiClient(token=st.session_state.token, base_url=settings.api_base_url)


def render_sign_in(error: ApiError):
    st.title("NeuroCare AI")
    st.warning("Please sign in to continue.")
    sign_in_url = error.payload.get("sign_in_url", settings.sign_in_url)
    st.caption(f"Sign-in page: {sign_in_url}")


def render_appointments(client: BookingApiClient):
    """My Appointments tab."""
    bookings = client.my_bookings()
    if not bookings:
        st.info("No appointments yet.")
        return

    for booking in bookings:
        appointment = booking["submission"]["appointment"]
        analysis = booking["submission"]["voice_analysis"]
        with st.container():
            col1, col2, col3, col4 = st.columns([2, 2, 2, 1])
            with col1:
                st.write(f"**{appointment['date']}** at {appointment['time']}")
            with col2:
                st.write(booking.get("doctor_name") or appointment["doctor_id"])
            with col3:
                st.write(f"Cognitive load: {analysis['cognitive_load_level']}")
            with col4:
                st.write(booking["status"].title())
            st.caption(appointment["reason"])
            st.markdown("---")


@st.dialog("Book Appointment", width="large")
def booking_dialog():
    """Quick-book modal."""
    render_booking_wizard(get_client(), key="modal")


def render_dashboard(client: BookingApiClient):
    """Dashboard with an embedded booking tab."""
    st.title("Patient Dashboard")

    if st.button("Quick Book", type="primary"):
        booking_dialog()

    appointments_tab, booking_tab = st.tabs(["My Appointments", "Book with Voice Analysis"])
    with appointments_tab:
        render_appointments(client)
    with booking_tab:
        render_booking_wizard(client, key="tab")


def render_booking_page(client: BookingApiClient):
    """Standalone booking page."""
    st.title("Book Appointment with Voice Analysis")
    st.caption("Schedule your consultation and complete AI-powered cognitive assessment")
    render_booking_wizard(client, key="page")


def main():
    """Main application entry point."""
    init_session_state()
    client = get_client()

    try:
        client.my_bookings()
    except ApiError as e:
        if e.status_code == 401:
            render_sign_in(e)
            return
        st.error(f"Failed to reach the booking service: {e.detail}")
        return

    with st.sidebar:
        st.header("NeuroCare AI")
        st.session_state.page = st.radio(
            "Navigate", ["Dashboard", "Book Appointment"], label_visibility="collapsed"
        )

    # Show messages
    if st.session_state.error_message:
        st.error(st.session_state.error_message)
        st.session_state.error_message = None

    if st.session_state.success_message:
        st.success(st.session_state.success_message)
        st.session_state.success_message = None

    try:
        if st.session_state.page == "Book Appointment":
            render_booking_page(client)
        else:
            render_dashboard(client)
    except ApiError as e:
        if e.status_code == 401:
            render_sign_in(e)
        else:
            st.error(e.detail)


if __name__ == "__main__":
    main()
