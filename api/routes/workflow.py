"""
Booking workflow routes.

GOVERNANCE:
- Workflows are only visible to the user who opened them
- NO booking without a completed voice analysis
- Raw audio is only returned to its owner
- Routes touching a workflow are async: workflow state changes only on the
  event loop that owns its pending step
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field

from api.dependencies import (
    WorkflowFactory,
    get_current_session,
    get_owned_workflow,
    get_workflow_factory,
    get_workflow_registry,
)
from api.models.analysis import VoiceAnalysisReport
from api.models.booking import BookingConfirmation
from api.models.recording import RecordingView
from api.models.session import UserSession
from api.models.workflow import WorkflowView
from services.media import ClientMicrophoneService
from storage import WorkflowRegistry
from workflow.passage import READING_PASSAGE, RECORDING_TIPS
from workflow.wizard import BookingWorkflow

router = APIRouter(prefix="/v1/workflows", tags=["workflows"])


class UpdateAppointmentRequest(BaseModel):
    """Field updates for the appointment draft."""

    fields: dict[str, str] = Field(default_factory=dict)


class StartRecordingRequest(BaseModel):
    """Outcome of the client's microphone permission prompt."""

    permission_granted: bool = True


class ReadingPassageResponse(BaseModel):
    """Text the patient reads aloud while recording."""

    passage: str
    tips: list[str]


@router.post("", response_model=WorkflowView, status_code=201)
async def open_workflow(
    session: UserSession = Depends(get_current_session),
    factory: WorkflowFactory = Depends(get_workflow_factory),
    registry: WorkflowRegistry = Depends(get_workflow_registry),
):
    """
    Open a booking workflow for the current user.

    GOVERNANCE:
    - Requires a resolved session (401 otherwise)
    """
    workflow = factory.create(session)
    registry.add(workflow)
    return workflow.snapshot()


@router.get("", response_model=list[WorkflowView])
async def list_workflows(
    session: UserSession = Depends(get_current_session),
    registry: WorkflowRegistry = Depends(get_workflow_registry),
):
    """The caller's open workflows (one per page, tab or dialog)."""
    return [w.snapshot() for w in registry.list_for_user(session.user_id)]


@router.get("/passage", response_model=ReadingPassageResponse)
def get_reading_passage():
    """Reading passage and recording tips."""
    return ReadingPassageResponse(passage=READING_PASSAGE, tips=list(RECORDING_TIPS))


@router.get("/{workflow_id}", response_model=WorkflowView)
async def get_workflow(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    return workflow.snapshot()


@router.delete("/{workflow_id}", response_model=WorkflowView)
async def cancel_workflow(
    workflow: BookingWorkflow = Depends(get_owned_workflow),
    registry: WorkflowRegistry = Depends(get_workflow_registry),
):
    """Cancel the workflow; any held microphone is released immediately."""
    workflow.cancel()
    registry.remove(workflow.workflow_id)
    return workflow.snapshot()


@router.post("/{workflow_id}/appointment", response_model=WorkflowView)
async def update_appointment(
    request: UpdateAppointmentRequest,
    workflow: BookingWorkflow = Depends(get_owned_workflow),
):
    """Apply field updates to the appointment draft (no validation yet)."""
    for field, value in request.fields.items():
        workflow.update_field(field, value)
    return workflow.snapshot()


@router.post("/{workflow_id}/advance", response_model=WorkflowView)
async def advance(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    """Move to the next step (details are validated when leaving step 1)."""
    workflow.advance()
    return workflow.snapshot()


@router.post("/{workflow_id}/back", response_model=WorkflowView)
async def back(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    workflow.back()
    return workflow.snapshot()


@router.post("/{workflow_id}/recording/start", response_model=RecordingView)
async def start_recording(
    request: StartRecordingRequest,
    workflow: BookingWorkflow = Depends(get_owned_workflow),
):
    """
    Start recording.

    GOVERNANCE:
    - Starting here stops any other active recording in the application
    """
    media = workflow.capture.media
    if isinstance(media, ClientMicrophoneService):
        media.report_permission(request.permission_granted)
    await workflow.start_recording()
    return workflow.capture.snapshot()


@router.post("/{workflow_id}/recording/pause", response_model=RecordingView)
async def pause_recording(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    workflow.pause_recording()
    return workflow.capture.snapshot()


@router.post("/{workflow_id}/recording/resume", response_model=RecordingView)
async def resume_recording(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    workflow.resume_recording()
    return workflow.capture.snapshot()


@router.post("/{workflow_id}/recording/stop", response_model=RecordingView)
async def stop_recording(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    workflow.stop_recording()
    return workflow.capture.snapshot()


@router.post("/{workflow_id}/recording/re-record", response_model=RecordingView)
async def re_record(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    """Discard the recording and any analysis of it."""
    workflow.re_record()
    return workflow.capture.snapshot()


@router.post("/{workflow_id}/recording/chunks", response_model=RecordingView)
async def upload_chunk(
    request: Request,
    workflow: BookingWorkflow = Depends(get_owned_workflow),
):
    """Append a chunk of captured audio (raw request body)."""
    workflow.push_audio(await request.body())
    return workflow.capture.snapshot()


@router.get("/{workflow_id}/recording/audio")
async def get_recording_audio(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    """Playable audio for the finalized recording."""
    audio = workflow.recorded_audio()
    if audio is None:
        raise HTTPException(status_code=404, detail="No finalized recording")
    return Response(content=audio, media_type="audio/wav")


@router.post("/{workflow_id}/analysis", response_model=VoiceAnalysisReport)
async def analyze(workflow: BookingWorkflow = Depends(get_owned_workflow)):
    """
    Run voice analysis on the stopped recording.

    GOVERNANCE:
    - Scores are mock values; a clinician reviews every booking
    """
    return await workflow.analyze()


@router.post("/{workflow_id}/submit", response_model=BookingConfirmation, status_code=201)
async def submit(
    workflow: BookingWorkflow = Depends(get_owned_workflow),
    registry: WorkflowRegistry = Depends(get_workflow_registry),
):
    """
    Submit the booking. The workflow closes on success.

    GOVERNANCE:
    - Rejected with 409 if no voice analysis exists
    """
    confirmation = await workflow.submit()
    registry.remove(workflow.workflow_id)
    return confirmation
