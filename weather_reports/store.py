"""
Observation store: persistence and queries for weather reports.

Every mutation is a committed SQLite transaction before the call returns; a
failed commit is rolled back and surfaces as ``PersistenceError``. All
operations on one store are serialized by a per-store lock.
"""

import logging
import re
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Mapping, Optional, Union

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from weather_reports.conditions import STAT_FLAGS, derive_clear, effective_conditions
from weather_reports.config import MEMORY_DB_PATH, WeatherReportsConfig, database_url_for
from weather_reports.database import (
    Base,
    check_db_connection,
    create_session_factory,
    create_store_engine,
)
from weather_reports.exceptions import (
    InvalidIdError,
    NotFoundError,
    PersistenceError,
    StoreNotOpenError,
    ValidationError,
)
from weather_reports.metrics import REPORTS_CREATED, REPORTS_DELETED, STORE_OPERATION_DURATION
from weather_reports.models import ConditionCounts, Observation, StationStats, WeatherReport, utc_now

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")
_MIN_ROW_ID = -(2 ** 63)
_MAX_ROW_ID = 2 ** 63 - 1


def parse_report_id(value: Union[int, str]) -> int:
    """
    Parse a report identifier.

    Args:
        value: int or decimal string (surrounding whitespace allowed)

    Returns:
        The identifier as int

    Raises:
        InvalidIdError: If the value is not integer-shaped
        NotFoundError: If the value is too long to convert; no such row exists
    """
    if isinstance(value, bool):
        raise InvalidIdError()
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _ID_PATTERN.fullmatch(value):
        try:
            return int(value)
        except ValueError:
            # Beyond the interpreter's int conversion limit
            raise NotFoundError("Weather report not found") from None
    raise InvalidIdError()


def normalize_station(station: Optional[str]) -> str:
    """Trim the station name, rejecting missing or blank values."""
    if not isinstance(station, str) or not station.strip():
        raise ValidationError("Station is required")
    return station.strip()


class ObservationStore:
    """
    Owns the ``weather_reports`` table.

    Lifecycle is open -> serve -> close; the store also works as a context
    manager. Independent instances never share state unless they point at
    the same database file.
    """

    def __init__(self, db_path: str = MEMORY_DB_PATH, echo: bool = False):
        """
        Args:
            db_path: SQLite file path, or ":memory:" for a non-durable store
            echo: Log emitted SQL statements
        """
        self.db_path = db_path
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: WeatherReportsConfig) -> "ObservationStore":
        return cls(db_path=config.db_path, echo=config.sql_echo)

    @property
    def in_memory(self) -> bool:
        return self.db_path == MEMORY_DB_PATH

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreNotOpenError()
        return self._engine

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> "ObservationStore":
        """Create the engine and make sure the schema exists."""
        with self._lock:
            if self._engine is not None:
                return self

            engine = create_store_engine(database_url_for(self.db_path), echo=self.echo)
            try:
                Base.metadata.create_all(bind=engine)
            except SQLAlchemyError as e:
                engine.dispose()
                raise PersistenceError(f"Failed to initialize database at {self.db_path}") from e

            self._engine = engine
            self._session_factory = create_session_factory(engine)

        logger.info(
            "Observation store opened (%s)",
            "in-memory" if self.in_memory else self.db_path,
        )
        return self

    def close(self) -> None:
        """Dispose of the engine. Safe to call more than once."""
        with self._lock:
            if self._engine is None:
                return
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
        logger.info("Observation store closed")

    def __enter__(self) -> "ObservationStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise StoreNotOpenError()
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    @staticmethod
    def _commit(session: Session, action: str) -> None:
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(
        self,
        station: Optional[str],
        conditions: Optional[Mapping[str, bool]] = None,
    ) -> Observation:
        """
        Store a new weather report.

        Args:
            station: Reporting station; trimmed before storage
            conditions: Condition flags; missing ones default to False

        Returns:
            The persisted observation, including its id and derived ``clear``

        Raises:
            ValidationError: Missing/blank station or malformed conditions
            PersistenceError: The row could not be committed
        """
        station = normalize_station(station)
        flags = effective_conditions(conditions)

        with STORE_OPERATION_DURATION.labels(operation="create").time():
            with self._lock, self._session() as session:
                row = self._build_row(station, flags)
                session.add(row)
                self._commit(session, "store weather report")
                observation = row.to_observation()

        REPORTS_CREATED.inc()
        logger.info(f"Stored weather report {observation.id} for station {observation.station}")
        return observation

    def get_all(self) -> list[Observation]:
        """All reports, newest first."""
        with STORE_OPERATION_DURATION.labels(operation="get_all").time():
            with self._lock, self._session() as session:
                rows = (
                    session.query(WeatherReport)
                    .order_by(WeatherReport.created_at.desc(), WeatherReport.id.desc())
                    .all()
                )
                return [row.to_observation() for row in rows]

    def get_by_id(self, report_id: Union[int, str]) -> Observation:
        """
        Fetch one report.

        Raises:
            InvalidIdError: ``report_id`` is not integer-shaped
            NotFoundError: No report with that id
        """
        report_id = parse_report_id(report_id)

        with STORE_OPERATION_DURATION.labels(operation="get_by_id").time():
            with self._lock, self._session() as session:
                row = self._find(session, report_id)
                return row.to_observation()

    def delete(self, report_id: Union[int, str]) -> None:
        """
        Delete one report.

        Raises:
            InvalidIdError: ``report_id`` is not integer-shaped
            NotFoundError: No report with that id
            PersistenceError: The deletion could not be committed
        """
        report_id = parse_report_id(report_id)

        with STORE_OPERATION_DURATION.labels(operation="delete").time():
            with self._lock, self._session() as session:
                row = self._find(session, report_id)

                session.delete(row)
                self._commit(session, f"delete weather report {report_id}")

        REPORTS_DELETED.inc()
        logger.info(f"Deleted weather report {report_id}")

    def stats_by_station(self, station: str) -> StationStats:
        """
        Count reports and per-flag occurrences for one station.

        The station name is matched exactly, without trimming or case folding.

        Raises:
            NotFoundError: The station has no reports
        """
        columns = [func.count(WeatherReport.id)] + [
            func.coalesce(func.sum(getattr(WeatherReport, flag)), 0)
            for flag in STAT_FLAGS
        ]

        with STORE_OPERATION_DURATION.labels(operation="stats_by_station").time():
            with self._lock, self._session() as session:
                row = (
                    session.query(*columns)
                    .filter(WeatherReport.station == station)
                    .one()
                )

        total, *counts = row
        if not total:
            raise NotFoundError("No reports found for this station")

        return StationStats(
            station=station,
            total_reports=int(total),
            conditions=ConditionCounts(**{
                flag: int(count) for flag, count in zip(STAT_FLAGS, counts)
            }),
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def count(self) -> int:
        """Number of stored reports."""
        with self._lock, self._session() as session:
            return session.query(func.count(WeatherReport.id)).scalar()

    def clear_all(self) -> int:
        """
        Delete every report. The id sequence is kept, so ids stay unique.

        Returns:
            Number of reports removed
        """
        with self._lock, self._session() as session:
            removed = session.query(WeatherReport).delete(synchronize_session=False)
            self._commit(session, "clear weather reports")

        logger.info(f"Removed {removed} weather reports")
        return removed

    def bulk_load(
        self,
        reports: Iterable[tuple[str, Mapping[str, bool], Optional[datetime]]],
    ) -> list[Observation]:
        """
        Store several reports in one transaction, optionally backdated.

        Each item is ``(station, conditions, created_at)``; a ``created_at`` of
        None means now. Validation is the same as for ``create``, and nothing
        is stored if any item is invalid.
        """
        prepared = [
            (normalize_station(station), effective_conditions(conditions), created_at)
            for station, conditions, created_at in reports
        ]

        with self._lock, self._session() as session:
            rows = [
                self._build_row(station, flags, created_at)
                for station, flags, created_at in prepared
            ]
            session.add_all(rows)
            self._commit(session, "load weather reports")
            observations = [row.to_observation() for row in rows]

        REPORTS_CREATED.inc(len(observations))
        logger.info(f"Loaded {len(observations)} weather reports")
        return observations

    def check_connection(self) -> bool:
        """Health probe; False when closed or the database is unreachable."""
        engine = self._engine
        if engine is None:
            return False
        return check_db_connection(engine)

    @staticmethod
    def _find(session: Session, report_id: int) -> WeatherReport:
        # SQLite integers are signed 64-bit; nothing outside that range exists
        if not _MIN_ROW_ID <= report_id <= _MAX_ROW_ID:
            raise NotFoundError("Weather report not found")
        row = session.get(WeatherReport, report_id)
        if row is None:
            raise NotFoundError("Weather report not found")
        return row

    @staticmethod
    def _build_row(
        station: str,
        flags: Mapping[str, bool],
        created_at: Optional[datetime] = None,
    ) -> WeatherReport:
        return WeatherReport(
            station=station,
            clear=int(derive_clear(flags)),
            created_at=created_at or utc_now(),
            **{flag: int(value) for flag, value in flags.items()},
        )
