import asyncio
from unittest.mock import AsyncMock

import pytest

from api.models.analysis import AnalysisStatus
from api.models.booking import BookingStatus
from api.models.recording import RecordingState
from api.models.workflow import WorkflowStatus, WorkflowStep
from services.scheduling import SubmissionError
from tests.fakes import FakeMedia, FakeTicker, fill_form
from workflow.errors import (
    InvalidState,
    MissingAnalysis,
    SubmissionFailed,
)


async def _analyzed(workflow, ticker, seconds=5):
    fill_form(workflow)
    workflow.validate_and_advance()
    await workflow.start_recording()
    workflow.push_audio(b"voice sample")
    ticker.fire(seconds)
    workflow.stop_recording()
    return await workflow.analyze()


@pytest.mark.asyncio
async def test_end_to_end_booking(make_workflow, ticker, booking_storage):
    workflow = make_workflow()
    fill_form(workflow)

    workflow.validate_and_advance()
    assert workflow.step == WorkflowStep.RECORDING

    await workflow.start_recording()
    ticker.fire(5)
    assert workflow.capture.session.elapsed_seconds == 5

    stopped = workflow.stop_recording()
    assert stopped.state == RecordingState.STOPPED
    assert stopped.result_url

    report = await workflow.analyze()
    assert 145 <= report.speech_rate_wpm < 165
    assert 80 <= report.clarity_score_pct < 95
    assert 85 <= report.confidence_level_pct < 95
    assert report.duration_seconds == 5

    assert workflow.advance() == WorkflowStep.REVIEW
    confirmation = await workflow.submit()

    assert confirmation.status == BookingStatus.PENDING
    assert "submitted successfully" in confirmation.message
    assert workflow.status == WorkflowStatus.COMPLETED

    booking = booking_storage.get(confirmation.booking_id)
    assert booking.submission.patient_id == "3"
    assert booking.submission.voice_analysis == report
    assert booking.doctor_name == "Dr. Sarah Chen"


@pytest.mark.asyncio
async def test_submit_without_analysis_never_reaches_scheduling(make_workflow):
    scheduling = AsyncMock()
    workflow = make_workflow(scheduling=scheduling)
    fill_form(workflow)
    workflow.validate_and_advance()

    with pytest.raises(MissingAnalysis) as exc_info:
        await workflow.submit()

    assert "complete voice analysis" in exc_info.value.message
    scheduling.create_booking.assert_not_called()
    assert workflow.is_open


@pytest.mark.asyncio
async def test_cannot_reach_review_without_analysis(make_workflow, ticker):
    workflow = make_workflow()
    fill_form(workflow)
    workflow.validate_and_advance()
    await workflow.start_recording()
    workflow.stop_recording()

    with pytest.raises(MissingAnalysis):
        workflow.advance()
    assert workflow.step == WorkflowStep.RECORDING


@pytest.mark.asyncio
async def test_re_record_invalidates_analysis(make_workflow, ticker):
    workflow = make_workflow()
    await _analyzed(workflow, ticker)
    workflow.advance()

    session = workflow.re_record()

    assert session.state == RecordingState.IDLE
    assert session.elapsed_seconds == 0
    assert workflow.analysis.report is None
    assert workflow.analysis.status == AnalysisStatus.NOT_STARTED
    assert workflow.step == WorkflowStep.RECORDING
    with pytest.raises(MissingAnalysis):
        await workflow.submit()


@pytest.mark.asyncio
async def test_cancel_while_recording_releases_microphone(make_workflow, media, arbiter):
    workflow = make_workflow()
    fill_form(workflow)
    workflow.validate_and_advance()
    await workflow.start_recording()

    assert workflow.cancel() is True

    assert media.last_handle.release_count == 1
    assert arbiter.holder is None
    assert workflow.status == WorkflowStatus.CANCELLED
    assert workflow.cancel() is False
    with pytest.raises(InvalidState):
        await workflow.start_recording()


@pytest.mark.asyncio
async def test_cancel_while_paused_releases_microphone(make_workflow, media):
    workflow = make_workflow()
    fill_form(workflow)
    workflow.validate_and_advance()
    await workflow.start_recording()
    workflow.pause_recording()

    workflow.cancel()

    assert media.last_handle.release_count == 1


@pytest.mark.asyncio
async def test_cancel_during_analysis(make_workflow, ticker):
    never = asyncio.Event()

    async def hang(audio, duration):
        await never.wait()

    analysis_service = AsyncMock()
    analysis_service.analyze.side_effect = hang
    workflow = make_workflow(analysis_service=analysis_service)
    fill_form(workflow)
    workflow.validate_and_advance()
    await workflow.start_recording()
    workflow.stop_recording()

    pending = asyncio.ensure_future(workflow.analyze())
    for _ in range(3):
        await asyncio.sleep(0)
    assert workflow.busy

    workflow.cancel()

    with pytest.raises(InvalidState):
        await pending
    assert workflow.status == WorkflowStatus.CANCELLED
    assert not workflow.busy


@pytest.mark.asyncio
async def test_steps_are_serialized(make_workflow, ticker):
    release = asyncio.Event()

    async def slow(audio, duration):
        await release.wait()
        raise AssertionError("not reached")

    analysis_service = AsyncMock()
    analysis_service.analyze.side_effect = slow
    workflow = make_workflow(analysis_service=analysis_service)
    fill_form(workflow)
    workflow.validate_and_advance()
    await workflow.start_recording()
    workflow.stop_recording()

    pending = asyncio.ensure_future(workflow.analyze())
    await asyncio.sleep(0)

    with pytest.raises(InvalidState):
        await workflow.analyze()
    with pytest.raises(InvalidState):
        workflow.re_record()

    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending
    assert workflow.is_open
    assert not workflow.busy


@pytest.mark.asyncio
async def test_submission_failure_keeps_form_and_analysis(make_workflow, ticker):
    scheduling = AsyncMock()
    scheduling.create_booking.side_effect = SubmissionError("scheduler offline")
    workflow = make_workflow(scheduling=scheduling)
    report = await _analyzed(workflow, ticker)
    workflow.advance()

    with pytest.raises(SubmissionFailed) as exc_info:
        await workflow.submit()

    assert "scheduler offline" in exc_info.value.message
    assert workflow.is_open
    assert workflow.step == WorkflowStep.REVIEW
    assert workflow.analysis.report == report
    assert workflow.form.draft.doctor_id == "dr-chen"

    confirmation = object()
    scheduling.create_booking.side_effect = None
    scheduling.create_booking.return_value = confirmation

    assert await workflow.submit() is confirmation
    assert scheduling.create_booking.await_count == 2


@pytest.mark.asyncio
async def test_unavailable_doctor_fails_submission(make_workflow, ticker):
    workflow = make_workflow()
    fill_form(workflow, doctor_id="dr-davis")
    workflow.validate_and_advance()
    await workflow.start_recording()
    ticker.fire(2)
    workflow.stop_recording()
    await workflow.analyze()

    with pytest.raises(SubmissionFailed):
        await workflow.submit()
    assert workflow.is_open


@pytest.mark.asyncio
async def test_completed_workflow_cannot_submit_again(make_workflow, ticker):
    workflow = make_workflow()
    await _analyzed(workflow, ticker)
    await workflow.submit()

    with pytest.raises(InvalidState):
        await workflow.submit()
    with pytest.raises(InvalidState):
        workflow.update_field("reason", "again")


@pytest.mark.asyncio
async def test_snapshot_hides_closed_workflow_data(make_workflow, ticker):
    workflow = make_workflow()
    await _analyzed(workflow, ticker)
    open_view = workflow.snapshot()
    assert open_view.recording.audio_bytes == len(b"voice sample")
    assert open_view.analysis is not None

    await workflow.submit()
    closed_view = workflow.snapshot()

    assert closed_view.status == WorkflowStatus.COMPLETED
    assert closed_view.appointment is None
    assert closed_view.recording is None
    assert closed_view.confirmation is not None


def test_navigation_bounds(make_workflow):
    workflow = make_workflow()

    with pytest.raises(InvalidState):
        workflow.back()

    fill_form(workflow)
    assert workflow.advance() == WorkflowStep.RECORDING
    assert workflow.back() == WorkflowStep.DETAILS


@pytest.mark.asyncio
async def test_recording_only_on_recording_step(make_workflow):
    workflow = make_workflow()

    with pytest.raises(InvalidState):
        await workflow.start_recording()


@pytest.mark.asyncio
async def test_two_workflows_share_one_microphone(make_workflow, arbiter):
    first_media, second_media = FakeMedia(), FakeMedia()
    first = make_workflow(media=first_media, ticker=FakeTicker())
    second = make_workflow(media=second_media, ticker=FakeTicker())
    for workflow in (first, second):
        fill_form(workflow)
        workflow.validate_and_advance()

    await first.start_recording()
    await second.start_recording()

    assert first.capture.state == RecordingState.STOPPED
    assert first_media.last_handle.release_count == 1
    assert arbiter.holder is second.capture
