"""Database engine and session factory helpers."""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for ORM models
Base = declarative_base()


def create_store_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for a SQLite database.

    In-memory databases share one connection across threads, otherwise every
    pooled connection would see its own empty database.

    Args:
        database_url: SQLite URL (file or ``sqlite:///:memory:``)
        echo: Log emitted SQL statements

    Returns:
        Configured engine
    """
    connect_args = {"check_same_thread": False}

    if database_url.endswith(":memory:"):
        return create_engine(
            database_url,
            connect_args=connect_args,
            poolclass=StaticPool,
            echo=echo,
        )

    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def check_db_connection(engine: Engine) -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection successful, False otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        return False
