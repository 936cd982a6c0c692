"""Session gate: decides whether a booking workflow may open."""

from typing import Optional

from loguru import logger

from api.models.session import UserSession
from services.identity import IdentityProvider
from workflow.errors import Unauthenticated


class SessionGate:
    """Resolves the caller's identity before any workflow is created."""

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    def resolve_session(self, token: Optional[str]) -> UserSession:
        """
        Read the current session from the identity provider.

        Raises:
            Unauthenticated: no session for this token
        """
        session = self.identity.get_current_session(token)
        if session is None:
            logger.debug("Session gate rejected request without a valid session")
            raise Unauthenticated()
        return session
