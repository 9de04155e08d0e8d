"""Health check endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from weather_reports import __version__
from weather_reports.exceptions import StoreNotOpenError

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    database: str
    message: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Verifies that the API is running and the observation store answers queries.

    Returns:
        Health status information

    Raises:
        503: Store closed or not answering
    """
    store = getattr(request.app.state, "store", None)
    db_healthy = store is not None and store.check_connection()

    if not db_healthy:
        raise StoreNotOpenError("Database connection failed")

    return HealthResponse(
        status="healthy",
        database="in-memory" if store.in_memory else "connected",
        message="Weather Reports API is running"
    )


@router.get("/")
async def root() -> dict:
    """
    Root endpoint with API information.

    Returns:
        Basic API information
    """
    return {
        "service": "Weather Reports API",
        "version": __version__,
        "documentation": "/docs",
        "health_check": "/health"
    }
