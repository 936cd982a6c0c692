"""
FastAPI application for NeuroCare booking.

GOVERNANCE:
- NO booking without a completed voice analysis
- Voice analysis scores are mock values, never a diagnosis
- All bookings reviewed by a clinician
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from api.errors import register_exception_handlers
from api.routes import bookings_router, doctors_router, workflow_router
from config import get_settings
from logging_config import setup_logging
from storage import get_registry

settings = get_settings()
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("NeuroCare booking API starting")
    yield
    # Open workflows may still hold the microphone
    cancelled = 0
    for workflow in get_registry().drain():
        if workflow.cancel():
            cancelled += 1
    logger.info(f"Shutdown complete ({cancelled} open workflows cancelled)")


app = FastAPI(
    title="NeuroCare Booking API",
    description="Appointment booking with voice-based cognitive assessment",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

register_exception_handlers(app)

app.include_router(workflow_router)
app.include_router(bookings_router)
app.include_router(doctors_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "neurocare_booking",
        "open_workflows": len(get_registry()),
    }


@app.get("/")
def root():
    """Root endpoint with API info."""
    return {
        "service": "NeuroCare Booking API",
        "version": "1.0.0",
        "governance": "No booking without a completed voice analysis",
        "endpoints": {
            "workflows": "/v1/workflows",
            "bookings": "/v1/bookings",
            "doctors": "/v1/doctors",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
