"""Map workflow errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from config import get_settings
from workflow.errors import (
    AnalysisFailed,
    InvalidState,
    MissingAnalysis,
    PermissionDenied,
    SubmissionFailed,
    Unauthenticated,
    ValidationError,
    WorkflowError,
)

STATUS_CODES: dict[type[WorkflowError], int] = {
    Unauthenticated: 401,
    ValidationError: 422,
    PermissionDenied: 403,
    InvalidState: 409,
    MissingAnalysis: 409,
    AnalysisFailed: 502,
    SubmissionFailed: 502,
}


def status_code_for(exc: WorkflowError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400


async def workflow_exception_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    """4xx/5xx with a stable error code the UI can act on."""
    status_code = status_code_for(exc)
    content = {"error": exc.code, "detail": exc.message}

    if isinstance(exc, ValidationError):
        content["fields"] = exc.fields
    if isinstance(exc, Unauthenticated):
        content["sign_in_url"] = get_settings().sign_in_url

    logger.warning(
        f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}"
    )
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowError, workflow_exception_handler)
