import math
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.db import DatabaseError

from availability.services import freshness
from availability.services.freshness import DEGRADED_FRESHNESS, current_freshness, evaluate_freshness

NOW = datetime(2025, 1, 23, 20, 0, tzinfo=dt_timezone.utc)


def test_thirteen_hours_is_stale():
    state = evaluate_freshness(NOW - timedelta(hours=13), now=NOW)
    assert state.is_stale
    assert state.hours_since_last_scrape == pytest.approx(13)
    assert state.has_data


def test_eleven_hours_is_fresh():
    state = evaluate_freshness(NOW - timedelta(hours=11), now=NOW)
    assert not state.is_stale


def test_exactly_twelve_hours_is_fresh():
    assert not evaluate_freshness(NOW - timedelta(hours=12), now=NOW).is_stale
    assert evaluate_freshness(NOW - timedelta(hours=12, seconds=1), now=NOW).is_stale


def test_no_data_is_stale_with_unknown_hours():
    state = evaluate_freshness(None, now=NOW)
    assert state.is_stale
    assert not state.has_data
    assert math.isinf(state.hours_since_last_scrape)
    assert state.to_dict() == {'isStale': True, 'lastScrapeTime': None, 'hoursSinceLastScrape': None}


def test_unknown_hours_sentinel_is_configurable():
    assert evaluate_freshness(None, unknown_hours=-1).hours_since_last_scrape == -1


def test_future_timestamp_clamps_to_zero():
    state = evaluate_freshness(NOW + timedelta(hours=2), now=NOW)
    assert state.hours_since_last_scrape == 0
    assert not state.is_stale


def test_to_dict_rounds_hours():
    state = evaluate_freshness(NOW - timedelta(minutes=100), now=NOW)
    assert state.to_dict()['hoursSinceLastScrape'] == 1.67
    assert state.to_dict()['lastScrapeTime'] == (NOW - timedelta(minutes=100)).isoformat()


@pytest.mark.django_db
def test_current_freshness_reads_newest_row(make_ward):
    make_ward('Kardiologia', 'A', scraped_at=NOW - timedelta(hours=20))
    make_ward('Kardiologia', 'B', scraped_at=NOW - timedelta(hours=2))
    state = current_freshness(now=NOW)
    assert state.last_scraped_at == NOW - timedelta(hours=2)
    assert not state.is_stale


@pytest.mark.django_db
def test_current_freshness_empty_table_is_stale():
    assert current_freshness(now=NOW).is_stale


def test_current_freshness_degrades_on_database_error(monkeypatch):
    def broken():
        raise DatabaseError('down')

    monkeypatch.setattr(freshness, '_newest_scrape', broken)
    assert current_freshness(now=NOW) == DEGRADED_FRESHNESS
    assert freshness.latest_scrape_time() is None
