"""Weather report endpoints."""

from fastapi import APIRouter, Depends, status

from weather_reports.dependencies import get_store
from weather_reports.models import (
    ErrorResponse,
    MessageResponse,
    Observation,
    ReportCreatedResponse,
    WeatherReportCreate,
)
from weather_reports.store import ObservationStore

router = APIRouter(prefix="/weather", tags=["weather"])


@router.post(
    "",
    response_model=ReportCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def submit_report(
    payload: WeatherReportCreate,
    store: ObservationStore = Depends(get_store)
) -> ReportCreatedResponse:
    """
    Submit a weather report for a station.

    Body fields:
    - **station**: Station identifier (required, surrounding whitespace is trimmed)
    - **fog**, **rain**, **snow**, **hail**, **thunder**, **tornado**: JSON booleans, default false

    ``clear`` is derived: true only when no condition is reported.

    Raises:
        400: Station missing or a condition is not a boolean
    """
    report = store.create(payload.station, payload.conditions())

    return ReportCreatedResponse(
        message="Weather report submitted successfully",
        id=report.id,
        report=report
    )


@router.get("", response_model=list[Observation])
async def list_reports(
    store: ObservationStore = Depends(get_store)
) -> list[Observation]:
    """
    List all weather reports, most recent first.

    Returns:
        Possibly empty list of reports
    """
    return store.get_all()


@router.get(
    "/{report_id}",
    response_model=Observation,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_report(
    report_id: str,
    store: ObservationStore = Depends(get_store)
) -> Observation:
    """
    Get a single weather report.

    Raises:
        400: Id is not an integer
        404: Report not found
    """
    return store.get_by_id(report_id)


@router.delete(
    "/{report_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_report(
    report_id: str,
    store: ObservationStore = Depends(get_store)
) -> MessageResponse:
    """
    Delete a weather report.

    Raises:
        400: Id is not an integer
        404: Report not found
    """
    store.delete(report_id)
    return MessageResponse(message="Weather report deleted successfully")
