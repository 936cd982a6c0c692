"""Provider directory with a fixed roster."""

from typing import Optional, Protocol

from api.models.appointment import Doctor

DEFAULT_ROSTER = (
    Doctor(id="dr-chen", name="Dr. Sarah Chen", specialty="Neurologist"),
    Doctor(id="dr-roberts", name="Dr. Michael Roberts", specialty="Cognitive Specialist"),
    Doctor(id="dr-johnson", name="Dr. Emily Johnson", specialty="Geriatric Medicine"),
    Doctor(
        id="dr-davis",
        name="Dr. Emily Davis",
        specialty="General Practitioner",
        available=False,
    ),
)


class ProviderDirectory(Protocol):
    """Lists the doctors a patient may book with."""

    def list_doctors(self) -> list[Doctor]: ...

    def get_doctor(self, doctor_id: str) -> Optional[Doctor]: ...


class StaticProviderDirectory:
    """Directory backed by an enumerated roster."""

    def __init__(self, roster: tuple[Doctor, ...] = DEFAULT_ROSTER):
        self._doctors = {doctor.id: doctor for doctor in roster}

    def list_doctors(self) -> list[Doctor]:
        return list(self._doctors.values())

    def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        return self._doctors.get(doctor_id)
