"""Per-station statistics endpoint."""

from fastapi import APIRouter, Depends

from weather_reports.dependencies import get_store
from weather_reports.models import ErrorResponse, StationStats
from weather_reports.store import ObservationStore

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get(
    "/{station:path}",
    response_model=StationStats,
    responses={404: {"model": ErrorResponse}},
)
async def get_station_stats(
    station: str,
    store: ObservationStore = Depends(get_store)
) -> StationStats:
    """
    Get report counts for a station.

    Path parameters:
    - **station**: Station identifier, matched exactly as stored

    Returns:
        Total number of reports and how many reported each condition

    Raises:
        404: Station has no reports
    """
    return store.stats_by_station(station)
