"""FastAPI dependencies."""

from fastapi import Request

from weather_reports.exceptions import StoreNotOpenError
from weather_reports.store import ObservationStore


def get_store(request: Request) -> ObservationStore:
    """
    Dependency for FastAPI endpoints to get the application's observation store.

    Raises:
        StoreNotOpenError: The application has no open store
    """
    store = getattr(request.app.state, "store", None)
    if store is None or not store.is_open:
        raise StoreNotOpenError()
    return store
