"""Tests for database initialization and seeding."""

from datetime import datetime

import pytest

from weather_reports.init_db import SAMPLE_REPORTS, init_database, main, seed_store
from weather_reports.store import ObservationStore


def test_init_without_seed(tmp_path):
    """Test creating an empty database file."""
    db_path = tmp_path / "weather.db"

    count = init_database(str(db_path))

    assert count == 0
    assert db_path.exists()
    with ObservationStore(db_path=str(db_path)) as store:
        assert store.get_all() == []


def test_cli_seed(tmp_path):
    """Test seeding through the command line entry point."""
    db_path = str(tmp_path / "weather.db")

    assert main(["--db-path", db_path, "--seed"]) == 0

    with ObservationStore(db_path=db_path) as store:
        assert store.count() == len(SAMPLE_REPORTS) == 25

        ord_stats = store.stats_by_station("ORD")
        assert ord_stats.total_reports == 5
        assert ord_stats.conditions.clear == 2
        assert ord_stats.conditions.fog == 1
        assert ord_stats.conditions.rain == 2
        assert ord_stats.conditions.snow == 1
        assert ord_stats.conditions.thunder == 1
        assert ord_stats.conditions.tornado == 0

        assert store.stats_by_station("MIA").conditions.tornado == 1


def test_seed_is_backdated(store):
    """Test that sample reports are spread over the past week."""
    now = datetime(2024, 6, 15, 12, 0, 0)

    seed_store(store, now=now)
    reports = store.get_all()

    assert reports[0].created_at == datetime(2024, 6, 12, 12, 0, 0)
    assert reports[-1].created_at == datetime(2024, 6, 8, 12, 0, 0)
    # Same timestamp for every station on a day; the latest insert wins
    assert reports[0].station == "MIA"
    assert reports[0].tornado is True


def test_seed_replaces_existing_reports(store):
    """Test that seeding twice leaves one copy with fresh ids."""
    first = seed_store(store)
    max_id = max(r.id for r in store.get_all())

    second = seed_store(store)

    assert first == second == 25
    assert min(r.id for r in store.get_all()) > max_id


def test_seed_derives_clear(store):
    """Test that seeded rows obey the clear rule."""
    seed_store(store)

    for report in store.get_all():
        flags = [report.fog, report.rain, report.snow, report.hail, report.thunder, report.tornado]
        assert report.clear is (not any(flags))


@pytest.mark.parametrize("argv", [["--bogus"]])
def test_cli_rejects_unknown_arguments(argv):
    """Test argparse validation."""
    with pytest.raises(SystemExit):
        main(argv)
