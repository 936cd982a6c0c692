import random

import pytest
from fastapi.testclient import TestClient

from api.dependencies import (
    WorkflowFactory,
    get_directory,
    get_scheduling_service,
    get_workflow_factory,
)
from api.main import app
from api.models.session import Role, UserSession
from config import get_settings
from intelligence.analysis import MockAnalysisService
from services.directory import StaticProviderDirectory
from services.scheduling import InMemorySchedulingService
from storage import get_registry, get_storage
from storage.bookings import BookingStorage
from tests.fakes import FakeMedia, FakeTicker
from workflow.device import MicrophoneArbiter, get_arbiter
from workflow.wizard import BookingWorkflow


@pytest.fixture
def patient():
    return UserSession(user_id="3", display_name="John Doe", role=Role.PATIENT)


@pytest.fixture
def directory():
    return StaticProviderDirectory()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def ticker():
    return FakeTicker()


@pytest.fixture
def arbiter():
    return MicrophoneArbiter()


@pytest.fixture
def analysis_service():
    return MockAnalysisService(delay_seconds=0, rng=random.Random(7))


@pytest.fixture
def booking_storage():
    return BookingStorage()


@pytest.fixture
def scheduling(booking_storage, directory):
    return InMemorySchedulingService(storage=booking_storage, directory=directory)


@pytest.fixture
def make_workflow(patient, directory, media, ticker, arbiter, analysis_service, scheduling):
    """Build a workflow wired to fakes; keyword arguments override collaborators."""

    def _make(**overrides):
        kwargs = dict(
            session=patient,
            directory=directory,
            media=media,
            analysis_service=analysis_service,
            scheduling=scheduling,
            arbiter=arbiter,
            ticker=ticker,
        )
        kwargs.update(overrides)
        return BookingWorkflow(**kwargs)

    return _make


class FakeTickerFactory(WorkflowFactory):
    def make_ticker(self):
        return FakeTicker()


@pytest.fixture
def workflow_factory():
    """Fresh storage and microphones; the app builds workflows with this factory."""
    get_storage.cache_clear()
    get_registry.cache_clear()
    get_scheduling_service.cache_clear()
    get_arbiter.cache_clear()
    factory = FakeTickerFactory(
        directory=get_directory(),
        analysis_service=MockAnalysisService(delay_seconds=0, rng=random.Random(5)),
        scheduling=get_scheduling_service(),
        settings=get_settings(),
    )
    app.dependency_overrides[get_workflow_factory] = lambda: factory
    yield factory
    app.dependency_overrides.clear()


@pytest.fixture
def client(workflow_factory):
    """TestClient over the app with hand-driven tickers."""
    with TestClient(app) as test_client:
        yield test_client
