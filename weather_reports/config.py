"""Configuration management for the Weather Reports API."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


MEMORY_DB_PATH = ":memory:"


class WeatherReportsConfig(BaseSettings):
    """API configuration with SQLite storage settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage (":memory:" keeps everything in process, without durability)
    db_path: str = "./weather.db"
    sql_echo: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # API settings
    api_title: str = "Weather Reports API"
    api_version: str = "1.0.0"
    api_description: str = "REST API for submitting station weather reports and per-station statistics"

    # CORS settings
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    @property
    def in_memory(self) -> bool:
        """Whether the store runs without a backing file."""
        return self.db_path == MEMORY_DB_PATH

    @property
    def database_url(self) -> str:
        """Construct the SQLAlchemy SQLite URL."""
        return database_url_for(self.db_path)


def database_url_for(db_path: str) -> str:
    """Build a SQLite URL for a file path or the in-memory marker."""
    if db_path == MEMORY_DB_PATH:
        return "sqlite:///:memory:"
    return f"sqlite:///{db_path}"


# Global config instance
_config: Optional[WeatherReportsConfig] = None


def get_config() -> WeatherReportsConfig:
    """Get or create global configuration instance."""
    global _config
    if _config is None:
        _config = WeatherReportsConfig()
    return _config
