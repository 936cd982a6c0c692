"""
Booking wizard view shared by every entry point of the patient portal.

GOVERNANCE:
- NO booking without a completed voice analysis
- Voice analysis is shown as informational, not diagnostic
"""

from datetime import date, time
from typing import Callable, Optional

import streamlit as st

from patient_portal.client import ApiError, BookingApiClient
from workflow.passage import format_elapsed

STEP_LABELS = {1: "Appointment Details", 2: "Voice Recording", 3: "Review & Submit"}


def _state_key(key: str) -> str:
    return f"{key}_workflow_id"


def _show_error(e: ApiError) -> None:
    if e.fields:
        st.error(f"{e.detail} ({', '.join(e.fields)})")
    else:
        st.error(e.detail)


def reset_wizard(key: str) -> None:
    """Forget the workflow tracked under `key`."""
    st.session_state.pop(_state_key(key), None)


def cancel_wizard(client: BookingApiClient, key: str) -> None:
    """Cancel the tracked workflow and release its microphone."""
    workflow_id = st.session_state.get(_state_key(key))
    if workflow_id:
        try:
            client.cancel_workflow(workflow_id)
        except ApiError as e:
            if e.status_code != 404:
                _show_error(e)
    reset_wizard(key)


def render_progress(step: int) -> None:
    cols = st.columns(3)
    for number, col in zip(STEP_LABELS, cols):
        with col:
            if number < step:
                st.success(f"{number}. {STEP_LABELS[number]}")
            elif number == step:
                st.info(f"**{number}. {STEP_LABELS[number]}**")
            else:
                st.caption(f"{number}. {STEP_LABELS[number]}")


def render_details_step(client: BookingApiClient, key: str, workflow: dict) -> None:
    draft = workflow.get("appointment") or {}
    doctors = client.list_doctors()
    labels = {
        d["id"]: f"{d['name']} - {d['specialty']}" + ("" if d["available"] else " (unavailable)")
        for d in doctors
    }
    doctor_ids = list(labels)

    with st.form(f"{key}_details_form"):
        col1, col2 = st.columns(2)
        with col1:
            preferred_date = st.date_input(
                "Preferred Date",
                value=date.fromisoformat(draft["date"]) if draft.get("date") else None,
                min_value=date.today(),
            )
        with col2:
            preferred_time = st.time_input(
                "Preferred Time",
                value=time.fromisoformat(draft["time"]) if draft.get("time") else None,
                step=900,
            )

        doctor_id = st.selectbox(
            "Select Doctor",
            options=doctor_ids,
            index=doctor_ids.index(draft["doctor_id"]) if draft.get("doctor_id") in doctor_ids else None,
            format_func=lambda value: labels[value],
            placeholder="Select a doctor",
        )
        reason = st.text_area(
            "Primary Reason for Visit",
            value=draft.get("reason", ""),
            placeholder="Describe your main concerns or reason for this appointment...",
        )
        symptoms = st.text_area("Current Symptoms (optional)", value=draft.get("symptoms", ""))
        medical_history = st.text_area(
            "Relevant Medical History (optional)", value=draft.get("medical_history", "")
        )

        submitted = st.form_submit_button("Continue to Voice Recording", type="primary")

    if submitted:
        try:
            client.update_appointment(
                workflow["workflow_id"],
                date=preferred_date.isoformat() if preferred_date else "",
                time=preferred_time.strftime("%H:%M") if preferred_time else "",
                doctor_id=doctor_id or "",
                reason=reason,
                symptoms=symptoms,
                medical_history=medical_history,
            )
            client.advance(workflow["workflow_id"])
            st.rerun()
        except ApiError as e:
            _show_error(e)


def render_report(report: dict) -> None:
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Speech Rate", f"{report['speech_rate_wpm']} wpm")
    with col2:
        st.metric("Clarity", f"{report['clarity_score_pct']}%")
    with col3:
        st.metric("Confidence", f"{report['confidence_level_pct']}%")

    st.write(f"**Cognitive Load:** {report['cognitive_load_level']}")
    st.write(f"**Assessment:** {report['risk_assessment']}")
    st.write("**Recommendations:**")
    for item in report.get("recommendations", []):
        st.write(f"- {item}")
    st.caption("This analysis is informational and will be reviewed by your doctor.")


def render_recording_step(client: BookingApiClient, key: str, workflow: dict) -> None:
    workflow_id = workflow["workflow_id"]
    recording = workflow.get("recording") or {}
    state = recording.get("state", "idle")

    passage = client.reading_passage()
    st.subheader("Please read the following passage aloud")
    st.info(passage["passage"])
    with st.expander("Recording tips"):
        for tip in passage["tips"]:
            st.write(f"- {tip}")

    elapsed = format_elapsed(recording.get("elapsed_seconds", 0))
    if recording.get("max_seconds"):
        elapsed += f" / {format_elapsed(recording['max_seconds'])}"
    st.write(f"**Status:** {state.title()}   **Time:** {elapsed}")

    try:
        if state == "idle":
            allow = st.checkbox("Allow microphone access", value=True, key=f"{key}_allow_mic")
            if st.button("Start Recording", key=f"{key}_start", type="primary"):
                client.start_recording(workflow_id, permission_granted=allow)
                st.rerun()

        elif state in ("recording", "paused"):
            if state == "recording":
                captured = st.audio_input("Capture your voice", key=f"{key}_capture")
                if captured is not None and st.button("Attach Audio", key=f"{key}_attach"):
                    client.upload_audio(workflow_id, captured.getvalue())
                    st.rerun()

            col1, col2 = st.columns(2)
            with col1:
                if state == "recording":
                    if st.button("Pause", key=f"{key}_pause"):
                        client.pause_recording(workflow_id)
                        st.rerun()
                elif st.button("Resume", key=f"{key}_resume"):
                    client.resume_recording(workflow_id)
                    st.rerun()
            with col2:
                if st.button("Stop", key=f"{key}_stop", type="primary"):
                    client.stop_recording(workflow_id)
                    st.rerun()

        elif state == "stopped":
            if recording.get("audio_bytes"):
                st.audio(client.recording_audio(workflow_id), format="audio/wav")

            report = workflow.get("analysis")
            if report:
                st.success("Voice analysis complete")
                render_report(report)
            elif st.button("Analyze Voice", key=f"{key}_analyze", type="primary"):
                with st.spinner("Analyzing your voice..."):
                    client.analyze(workflow_id)
                st.rerun()

            if st.button("Re-record", key=f"{key}_rerecord"):
                client.re_record(workflow_id)
                st.rerun()
    except ApiError as e:
        _show_error(e)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Back", key=f"{key}_back_2"):
            try:
                client.back(workflow_id)
                st.rerun()
            except ApiError as e:
                _show_error(e)
    with col2:
        if st.button(
            "Continue to Review",
            key=f"{key}_next_2",
            disabled=not workflow.get("analysis"),
        ):
            try:
                client.advance(workflow_id)
                st.rerun()
            except ApiError as e:
                _show_error(e)


def render_review_step(
    client: BookingApiClient,
    key: str,
    workflow: dict,
    on_complete: Optional[Callable[[dict], None]] = None,
) -> None:
    workflow_id = workflow["workflow_id"]
    draft = workflow.get("appointment") or {}
    report = workflow.get("analysis")

    st.subheader("Appointment Summary")
    st.write(f"**Date:** {draft.get('date')}  **Time:** {draft.get('time')}")
    st.write(f"**Doctor:** {draft.get('doctor_id')}")
    st.write(f"**Reason:** {draft.get('reason')}")
    if draft.get("symptoms"):
        st.write(f"**Symptoms:** {draft['symptoms']}")
    if draft.get("medical_history"):
        st.write(f"**Medical History:** {draft['medical_history']}")

    st.markdown("---")
    st.subheader("Voice Analysis")
    if report:
        render_report(report)
    else:
        st.warning("Please complete voice analysis before submitting appointment request.")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Back", key=f"{key}_back_3"):
            try:
                client.back(workflow_id)
                st.rerun()
            except ApiError as e:
                _show_error(e)
    with col2:
        if st.button("Submit Appointment", key=f"{key}_submit", type="primary"):
            try:
                with st.spinner("Submitting..."):
                    confirmation = client.submit(workflow_id)
            except ApiError as e:
                _show_error(e)
            else:
                reset_wizard(key)
                st.session_state.success_message = confirmation["message"]
                if on_complete is not None:
                    on_complete(confirmation)
                st.rerun()


def render_booking_wizard(
    client: BookingApiClient,
    key: str,
    on_complete: Optional[Callable[[dict], None]] = None,
) -> None:
    """
    Render the three-step booking wizard.

    Args:
        client: API client for the signed-in user
        key: Distinct prefix per entry point (page, tab, dialog)
        on_complete: Called with the booking confirmation after submit
    """
    workflow_id = st.session_state.get(_state_key(key))

    if workflow_id is None:
        if st.button("Start New Booking", key=f"{key}_open", type="primary"):
            try:
                st.session_state[_state_key(key)] = client.open_workflow()["workflow_id"]
                st.rerun()
            except ApiError as e:
                _show_error(e)
        return

    try:
        workflow = client.get_workflow(workflow_id)
    except ApiError as e:
        if e.status_code == 404:
            reset_wizard(key)
            st.rerun()
        _show_error(e)
        return

    render_progress(workflow["step"])
    st.markdown("---")

    if workflow["step"] == 1:
        render_details_step(client, key, workflow)
    elif workflow["step"] == 2:
        render_recording_step(client, key, workflow)
    else:
        render_review_step(client, key, workflow, on_complete=on_complete)

    st.markdown("---")
    if st.button("Cancel Booking", key=f"{key}_cancel"):
        cancel_wizard(client, key)
        st.rerun()
