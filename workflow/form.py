"""
Appointment form stage.

GOVERNANCE:
- Doctor must be one of the directory roster
- No cross-field validation until the patient tries to advance
"""

import pydantic

from api.models.appointment import AppointmentDraft, AppointmentRequest
from services.directory import ProviderDirectory
from workflow.errors import ValidationError

EDITABLE_FIELDS = tuple(AppointmentDraft.model_fields)


class AppointmentFormStage:
    """Collects and validates an appointment request."""

    def __init__(self, directory: ProviderDirectory):
        self.directory = directory
        self.draft = AppointmentDraft()

    def update_field(self, field: str, value: str) -> AppointmentDraft:
        """Set one field of the draft."""
        if field not in EDITABLE_FIELDS:
            raise ValidationError([field], f"Unknown appointment field: {field}")
        if value is None:
            value = ""
        setattr(self.draft, field, str(value))
        return self.draft

    def validate(self) -> AppointmentRequest:
        """
        Check the draft and freeze it into an AppointmentRequest.

        Raises:
            ValidationError: names every missing or malformed field
        """
        missing = self.draft.missing_fields()
        if missing:
            raise ValidationError(missing)

        try:
            request = AppointmentRequest(**self.draft.model_dump())
        except pydantic.ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ValidationError(fields) from e

        if self.directory.get_doctor(request.doctor_id) is None:
            raise ValidationError(["doctor_id"], f"Unknown doctor: {request.doctor_id}")

        return request
