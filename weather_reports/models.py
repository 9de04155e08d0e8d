"""SQLAlchemy ORM models and Pydantic request/response schemas."""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from weather_reports.conditions import CONDITION_FLAGS, STAT_FLAGS
from weather_reports.database import Base


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (SQLite stores no offset)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# SQLAlchemy ORM Models (Database Tables)
# ============================================================================

class WeatherReport(Base):
    """Weather reports table. Flags are stored as 0/1 integers."""
    __tablename__ = "weather_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    station = Column(String, nullable=False)
    clear = Column(Integer, nullable=False, default=0)
    fog = Column(Integer, nullable=False, default=0)
    rain = Column(Integer, nullable=False, default=0)
    snow = Column(Integer, nullable=False, default=0)
    hail = Column(Integer, nullable=False, default=0)
    thunder = Column(Integer, nullable=False, default=0)
    tornado = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        *(CheckConstraint(f"{flag} IN (0, 1)", name=f"ck_weather_reports_{flag}")
          for flag in STAT_FLAGS),
        CheckConstraint("length(trim(station)) > 0", name="ck_weather_reports_station"),
        Index("idx_weather_reports_station", "station"),
        Index("idx_weather_reports_created_at", "created_at"),
        # Never hand out an id twice, even after deleting the newest row
        {"sqlite_autoincrement": True},
    )

    def to_observation(self) -> "Observation":
        """Translate the stored row into its public, boolean-flagged form."""
        return Observation(
            id=self.id,
            station=self.station,
            created_at=self.created_at,
            **{flag: getattr(self, flag) == 1 for flag in STAT_FLAGS},
        )


# ============================================================================
# Pydantic Models (API Requests and Responses)
# ============================================================================

class Observation(BaseModel):
    """One persisted weather report."""
    model_config = ConfigDict(frozen=True)

    id: int
    station: str
    clear: bool
    fog: bool
    rain: bool
    snow: bool
    hail: bool
    thunder: bool
    tornado: bool
    created_at: datetime


class WeatherReportCreate(BaseModel):
    """Body of ``POST /weather``. Flags must be real JSON booleans."""

    station: Optional[StrictStr] = None
    fog: Optional[StrictBool] = None
    rain: Optional[StrictBool] = None
    snow: Optional[StrictBool] = None
    hail: Optional[StrictBool] = None
    thunder: Optional[StrictBool] = None
    tornado: Optional[StrictBool] = None

    def conditions(self) -> dict[str, bool]:
        """Condition flags that were actually supplied."""
        return {
            flag: getattr(self, flag)
            for flag in CONDITION_FLAGS
            if getattr(self, flag) is not None
        }


class ReportCreatedResponse(BaseModel):
    """Response for a successfully stored report."""
    message: str
    id: int
    report: Observation


class MessageResponse(BaseModel):
    """Plain message response."""
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every client and server error."""
    error: str


class ConditionCounts(BaseModel):
    """Number of reports with each flag set."""
    clear: int = Field(default=0, ge=0)
    fog: int = Field(default=0, ge=0)
    rain: int = Field(default=0, ge=0)
    snow: int = Field(default=0, ge=0)
    hail: int = Field(default=0, ge=0)
    thunder: int = Field(default=0, ge=0)
    tornado: int = Field(default=0, ge=0)


class StationStats(BaseModel):
    """Aggregate statistics for one station."""
    station: str
    total_reports: int = Field(ge=1)
    conditions: ConditionCounts
