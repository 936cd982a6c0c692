from datetime import datetime, timedelta

import pytest

from api.models.analysis import CognitiveLoadLevel, VoiceAnalysisReport
from api.models.appointment import AppointmentRequest
from api.models.booking import Booking, BookingStatus, BookingSubmission
from storage.bookings import BookingStorage

REPORT = VoiceAnalysisReport(
    duration_seconds=10,
    transcript="The sun rises...",
    speech_rate_wpm=150,
    clarity_score_pct=88,
    confidence_level_pct=90,
    cognitive_load_level=CognitiveLoadLevel.LOW,
    risk_assessment="Within normal range",
)


def make_booking(booking_id: str, patient_id: str = "3", minutes_ago: int = 0, **kwargs) -> Booking:
    return Booking(
        booking_id=booking_id,
        created_at=datetime(2025, 3, 1, 12, 0) - timedelta(minutes=minutes_ago),
        submission=BookingSubmission(
            patient_id=patient_id,
            patient_name="John Doe",
            appointment=AppointmentRequest(
                date="2025-03-10", time="09:30", doctor_id="dr-chen", reason="checkup"
            ),
            voice_analysis=REPORT,
        ),
        **kwargs,
    )


def test_bookings_listed_newest_first():
    storage = BookingStorage()
    storage.create(make_booking("old", minutes_ago=30))
    storage.create(make_booking("new"))
    storage.create(make_booking("other", patient_id="7", minutes_ago=10))

    assert [b.booking_id for b in storage.list_all()] == ["new", "other", "old"]
    assert [b.booking_id for b in storage.list_for_patient("3")] == ["new", "old"]


def test_duplicate_booking_rejected():
    storage = BookingStorage()
    storage.create(make_booking("b1"))

    with pytest.raises(KeyError):
        storage.create(make_booking("b1"))


def test_update_requires_existing_booking():
    with pytest.raises(KeyError):
        BookingStorage().update(make_booking("ghost"))


def test_counts_and_status_filter():
    storage = BookingStorage()
    storage.create(make_booking("a"))
    storage.create(make_booking("b", status=BookingStatus.CONFIRMED))

    assert storage.count_by_status() == {
        "pending": 1,
        "confirmed": 1,
        "completed": 0,
        "cancelled": 0,
    }
    assert [b.booking_id for b in storage.list_by_status(BookingStatus.CONFIRMED)] == ["b"]
