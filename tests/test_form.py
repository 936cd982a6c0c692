import datetime as dt

import pytest

from api.models.appointment import REQUIRED_FIELDS
from api.models.workflow import WorkflowStep
from tests.fakes import VALID_APPOINTMENT, fill_form
from workflow.errors import InvalidState, ValidationError
from workflow.form import AppointmentFormStage


@pytest.fixture
def form(directory):
    return AppointmentFormStage(directory)


def test_valid_draft_freezes_into_request(form):
    for field, value in VALID_APPOINTMENT.items():
        form.update_field(field, value)
    form.update_field("symptoms", "  forgetfulness  ")

    request = form.validate()

    assert request.date == dt.date(2025, 3, 1)
    assert request.time == dt.time(10, 0)
    assert request.doctor_id == "dr-chen"
    assert request.symptoms == "forgetfulness"
    assert request.medical_history == ""


@pytest.mark.parametrize("missing", REQUIRED_FIELDS)
def test_each_missing_required_field_blocks_advance(make_workflow, missing):
    workflow = make_workflow()
    fill_form(workflow, **{missing: ""})

    with pytest.raises(ValidationError) as exc_info:
        workflow.validate_and_advance()

    assert exc_info.value.fields == [missing]
    assert workflow.step == WorkflowStep.DETAILS


def test_whitespace_only_counts_as_missing(form):
    for field, value in VALID_APPOINTMENT.items():
        form.update_field(field, value)
    form.update_field("reason", "   ")

    with pytest.raises(ValidationError) as exc_info:
        form.validate()

    assert exc_info.value.fields == ["reason"]


def test_all_missing_fields_reported_together(form):
    with pytest.raises(ValidationError) as exc_info:
        form.validate()

    assert exc_info.value.fields == list(REQUIRED_FIELDS)


def test_malformed_date_is_named(form):
    for field, value in dict(VALID_APPOINTMENT, date="next tuesday").items():
        form.update_field(field, value)

    with pytest.raises(ValidationError) as exc_info:
        form.validate()

    assert exc_info.value.fields == ["date"]


def test_unknown_doctor_rejected(form):
    for field, value in dict(VALID_APPOINTMENT, doctor_id="dr-nobody").items():
        form.update_field(field, value)

    with pytest.raises(ValidationError) as exc_info:
        form.validate()

    assert exc_info.value.fields == ["doctor_id"]


def test_unknown_field_name_rejected(form):
    with pytest.raises(ValidationError) as exc_info:
        form.update_field("insurance", "acme")

    assert exc_info.value.fields == ["insurance"]


def test_fields_locked_outside_details_step(make_workflow):
    workflow = make_workflow()
    fill_form(workflow)
    workflow.validate_and_advance()

    with pytest.raises(InvalidState):
        workflow.update_field("reason", "changed my mind")

    workflow.back()
    workflow.update_field("reason", "changed my mind")
    assert workflow.form.draft.reason == "changed my mind"
