"""External collaborators consumed by the booking workflow."""

from services.directory import ProviderDirectory, StaticProviderDirectory
from services.identity import DemoIdentityProvider, IdentityProvider
from services.media import (
    AudioStreamHandle,
    ClientMicrophoneService,
    DeviceMediaService,
)
from services.scheduling import (
    InMemorySchedulingService,
    SchedulingService,
    SubmissionError,
)

__all__ = [
    "ProviderDirectory",
    "StaticProviderDirectory",
    "DemoIdentityProvider",
    "IdentityProvider",
    "AudioStreamHandle",
    "ClientMicrophoneService",
    "DeviceMediaService",
    "InMemorySchedulingService",
    "SchedulingService",
    "SubmissionError",
]
