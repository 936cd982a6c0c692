"""
FastAPI dependencies.

Collaborators are cached singletons so tests can swap them with
app.dependency_overrides.
"""

import uuid
from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException

from api.models.session import UserSession
from config import Settings, get_settings
from intelligence import AnalysisService, MockAnalysisService
from services import (
    ClientMicrophoneService,
    DemoIdentityProvider,
    InMemorySchedulingService,
    SchedulingService,
    StaticProviderDirectory,
)
from services.directory import ProviderDirectory
from services.identity import IdentityProvider
from storage import WorkflowRegistry, get_registry, get_storage
from workflow.device import MicrophoneArbiter, get_arbiter
from workflow.gate import SessionGate
from workflow.timer import ThreadTicker
from workflow.wizard import BookingWorkflow


@lru_cache
def get_identity_provider() -> IdentityProvider:
    return DemoIdentityProvider()


@lru_cache
def get_directory() -> ProviderDirectory:
    return StaticProviderDirectory()


@lru_cache
def get_analysis_service() -> AnalysisService:
    return MockAnalysisService()


@lru_cache
def get_scheduling_service() -> SchedulingService:
    return InMemorySchedulingService(storage=get_storage(), directory=get_directory())


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer ...` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_session(
    authorization: Optional[str] = Header(default=None),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> UserSession:
    """Resolve the caller through the session gate (raises Unauthenticated)."""
    return SessionGate(identity).resolve_session(bearer_token(authorization))


class WorkflowFactory:
    """Builds booking workflows wired to the API's collaborators."""

    def __init__(
        self,
        directory: ProviderDirectory,
        analysis_service: AnalysisService,
        scheduling: SchedulingService,
        settings: Settings,
        arbiter_for: Callable[[str], MicrophoneArbiter] = get_arbiter,
    ):
        self.directory = directory
        self.analysis_service = analysis_service
        self.scheduling = scheduling
        self.arbiter_for = arbiter_for
        self.settings = settings

    def make_ticker(self):
        return ThreadTicker(self.settings.timer_interval_seconds)

    def create(self, session: UserSession) -> BookingWorkflow:
        workflow_id = str(uuid.uuid4())

        def playback_url(recording_id: str, audio: bytes) -> str:
            return f"/v1/workflows/{workflow_id}/recording/audio?recording={recording_id}"

        return BookingWorkflow(
            session=session,
            directory=self.directory,
            media=ClientMicrophoneService(),
            analysis_service=self.analysis_service,
            scheduling=self.scheduling,
            # Exclusive per user: one browser, one microphone
            arbiter=self.arbiter_for(session.user_id),
            ticker=self.make_ticker(),
            max_recording_seconds=self.settings.max_recording_seconds,
            playback_url=playback_url,
            workflow_id=workflow_id,
        )


def get_workflow_factory(
    directory: ProviderDirectory = Depends(get_directory),
    analysis_service: AnalysisService = Depends(get_analysis_service),
    scheduling: SchedulingService = Depends(get_scheduling_service),
) -> WorkflowFactory:
    return WorkflowFactory(
        directory=directory,
        analysis_service=analysis_service,
        scheduling=scheduling,
        settings=get_settings(),
    )


def get_workflow_registry() -> WorkflowRegistry:
    return get_registry()


def get_owned_workflow(
    workflow_id: str,
    session: UserSession = Depends(get_current_session),
    registry: WorkflowRegistry = Depends(get_workflow_registry),
) -> BookingWorkflow:
    """Look up a workflow that belongs to the caller."""
    workflow = registry.get(workflow_id)
    if workflow is None or workflow.session.user_id != session.user_id:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow
