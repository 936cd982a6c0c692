import random
from unittest.mock import AsyncMock

import pytest

from api.models.analysis import AnalysisStatus, CognitiveLoadLevel
from api.models.recording import RecordingSession, RecordingState
from intelligence.analysis import AnalysisError, MockAnalysisService
from workflow.analysis import AnalysisStage
from workflow.errors import AnalysisFailed, InvalidState


def _stopped(**kwargs) -> RecordingSession:
    return RecordingSession(
        state=RecordingState.STOPPED, elapsed_seconds=12, audio_buffer=b"audio", **kwargs
    )


@pytest.fixture
def service():
    return MockAnalysisService(delay_seconds=0, rng=random.Random(3))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "state", [RecordingState.IDLE, RecordingState.RECORDING, RecordingState.PAUSED]
)
async def test_analysis_requires_stopped_recording(state):
    service = AsyncMock()
    stage = AnalysisStage(service)

    with pytest.raises(InvalidState):
        await stage.analyze(RecordingSession(state=state))

    service.analyze.assert_not_called()
    assert stage.status == AnalysisStatus.NOT_STARTED
    assert stage.report is None


@pytest.mark.asyncio
async def test_report_stored_on_success(service):
    stage = AnalysisStage(service)
    session = _stopped()

    report = await stage.analyze(session)

    assert stage.status == AnalysisStatus.COMPLETE
    assert stage.report is report
    assert report.duration_seconds == 12


@pytest.mark.asyncio
async def test_same_recording_analyzed_once(service):
    spy = AsyncMock(wraps=service.analyze)
    service.analyze = spy
    stage = AnalysisStage(service)
    session = _stopped()

    first = await stage.analyze(session)
    second = await stage.analyze(session)

    assert first is second
    assert spy.await_count == 1


@pytest.mark.asyncio
async def test_service_error_keeps_recording_for_retry(service):
    stage = AnalysisStage(service)
    session = _stopped()
    real_analyze = service.analyze
    service.analyze = AsyncMock(side_effect=AnalysisError("model unavailable"))

    with pytest.raises(AnalysisFailed):
        await stage.analyze(session)

    assert stage.status == AnalysisStatus.FAILED
    assert stage.last_error == "model unavailable"
    assert stage.report is None
    assert session.audio_buffer == b"audio"

    service.analyze = real_analyze
    report = await stage.analyze(session)
    assert stage.status == AnalysisStatus.COMPLETE
    assert stage.last_error is None
    assert report is stage.report


@pytest.mark.asyncio
async def test_malformed_report_is_a_failure():
    service = AsyncMock()
    service.analyze.return_value = {"duration_seconds": 4, "clarity_score_pct": 140}
    stage = AnalysisStage(service)

    with pytest.raises(AnalysisFailed):
        await stage.analyze(_stopped())

    assert stage.status == AnalysisStatus.FAILED
    assert stage.report is None


@pytest.mark.asyncio
async def test_invalidate_discards_report(service):
    stage = AnalysisStage(service)
    await stage.analyze(_stopped())

    stage.invalidate()

    assert stage.report is None
    assert stage.status == AnalysisStatus.NOT_STARTED


@pytest.mark.asyncio
async def test_mock_scores_stay_in_range():
    service = MockAnalysisService(delay_seconds=0, rng=random.Random(11))

    for _ in range(50):
        report = await service.analyze(b"", 30)
        assert 145 <= report.speech_rate_wpm < 165
        assert 80 <= report.clarity_score_pct < 95
        assert 85 <= report.confidence_level_pct < 95
        assert report.cognitive_load_level in (CognitiveLoadLevel.LOW, CognitiveLoadLevel.MEDIUM)
        assert len(report.recommendations) == 4
        assert report.transcript.endswith("...")


@pytest.mark.asyncio
async def test_mock_rejects_negative_duration(service):
    with pytest.raises(AnalysisError):
        await service.analyze(b"", -1)


@pytest.mark.asyncio
async def test_unexpected_service_error_is_a_failure_and_retryable(service):
    stage = AnalysisStage(service)
    session = _stopped()
    real_analyze = service.analyze
    service.analyze = AsyncMock(side_effect=ConnectionError("backend unreachable"))

    with pytest.raises(AnalysisFailed):
        await stage.analyze(session)

    assert stage.status == AnalysisStatus.FAILED
    assert "backend unreachable" in stage.last_error

    service.analyze = real_analyze
    report = await stage.analyze(session)
    assert stage.status == AnalysisStatus.COMPLETE
    assert report is stage.report
