"""
Identity provider.

GOVERNANCE:
- Demo tokens only; no password handling
"""

from typing import Optional, Protocol

from api.models.session import Role, UserSession
from config import get_settings


class IdentityProvider(Protocol):
    """Resolves the current session for a bearer token."""

    def get_current_session(self, token: Optional[str]) -> Optional[UserSession]: ...


class DemoIdentityProvider:
    """In-memory token table seeded with the demo accounts."""

    def __init__(self, sessions: Optional[dict[str, UserSession]] = None):
        if sessions is None:
            sessions = demo_sessions()
        self._sessions = dict(sessions)

    def get_current_session(self, token: Optional[str]) -> Optional[UserSession]:
        if not token:
            return None
        return self._sessions.get(token)

    def register(self, token: str, session: UserSession) -> None:
        self._sessions[token] = session

    def revoke(self, token: str) -> None:
        self._sessions.pop(token, None)


def demo_sessions() -> dict[str, UserSession]:
    """Demo accounts keyed by the tokens in settings."""
    settings = get_settings()
    return {
        settings.demo_patient_token: UserSession(
            user_id="3", display_name="John Doe", role=Role.PATIENT
        ),
        settings.demo_doctor_token: UserSession(
            user_id="2", display_name="Dr. Sarah Chen", role=Role.DOCTOR
        ),
        settings.demo_admin_token: UserSession(
            user_id="1", display_name="Admin User", role=Role.ADMIN
        ),
    }
