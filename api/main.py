"""
FastAPI application for the Case Interview Simulator.
Provides API endpoints for a candidate-facing web front-end.

Run with: uvicorn api.main:app --reload --port 8000
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes.interview import router as interview_router
from config import configure_logging
from errors import (
    CaseAcquisitionError,
    CaseNotFoundError,
    EmptyUtteranceError,
    GradingError,
    MissingCredentialError,
    SessionStateError,
    TurnInProgressError,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Case Interview API",
    description="API for practising consulting case interviews",
    version="1.0.0"
)

# Configure CORS for local front-end dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative dev port
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(interview_router)


# Status code for each domain error
ERROR_STATUS = {
    MissingCredentialError: 401,
    CaseNotFoundError: 404,
    SessionStateError: 409,
    TurnInProgressError: 409,
    EmptyUtteranceError: 422,
    GradingError: 502,
    CaseAcquisitionError: 502,
}


def _make_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


for error_type, status_code in ERROR_STATUS.items():
    app.add_exception_handler(error_type, _make_handler(status_code))


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Case Interview API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
