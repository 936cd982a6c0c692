"""
User session models.

GOVERNANCE:
- Session context is passed explicitly into each workflow
- No global client-side store of role claims
"""

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Role attached to a session."""

    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class UserSession(BaseModel):
    """The resolved identity for the current request."""

    user_id: str = Field(..., min_length=1)
    display_name: str
    role: Role

    model_config = {"frozen": True}
