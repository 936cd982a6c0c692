"""
Configuration for NeuroCare booking.

GOVERNANCE:
- Voice analysis is a mock scorer, never a diagnosis
- No real credentials; demo session tokens only
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_base_url: str = "http://localhost:8000"
    cors_origins: list[str] = ["*"]

    # Where unauthenticated users are sent
    sign_in_url: str = "/auth/login"

    # Demo sessions (token -> user is resolved by the identity provider)
    demo_patient_token: str = "demo-patient-token"
    demo_doctor_token: str = "demo-doctor-token"
    demo_admin_token: str = "demo-admin-token"

    # Voice capture
    timer_interval_seconds: float = 1.0
    max_recording_seconds: int = 300

    # Mock analysis service
    analysis_delay_seconds: float = 3.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_prefix": "NEUROCARE_"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
