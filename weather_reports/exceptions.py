"""Errors raised by the observation store."""


class WeatherStoreError(Exception):
    """Base class for all store errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WeatherStoreError):
    """Submitted report is malformed (e.g. missing station)."""

    status_code = 400


class InvalidIdError(WeatherStoreError):
    """Identifier is not integer-shaped."""

    status_code = 400

    def __init__(self, message: str = "Invalid ID format"):
        super().__init__(message)


class NotFoundError(WeatherStoreError):
    """Well-formed request for a row or station that does not exist."""

    status_code = 404


class PersistenceError(WeatherStoreError):
    """Durable write failed; the mutation was rolled back."""

    status_code = 500


class StoreNotOpenError(WeatherStoreError):
    """Store used before ``open()`` or after ``close()``."""

    status_code = 503

    def __init__(self, message: str = "Observation store is not open"):
        super().__init__(message)
