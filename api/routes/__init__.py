"""API routes."""

from api.routes.bookings import router as bookings_router
from api.routes.doctors import router as doctors_router
from api.routes.workflow import router as workflow_router

__all__ = ["workflow_router", "bookings_router", "doctors_router"]
