"""
Data freshness derived from the newest ``scraped_at`` timestamp.

Data is stale when the newest row is more than :data:`STALE_AFTER_HOURS`
old.  Exactly twelve hours still counts as fresh.  When there is no data
at all the state is the least fresh one: stale, ``has_data`` false and
the hours set to the caller's "unknown" sentinel.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from django.db import DatabaseError
from django.db.models import Max
from django.utils import timezone

from availability.models import HospitalWard

logger = logging.getLogger(__name__)

STALE_AFTER_HOURS = 12
UNKNOWN_HOURS = math.inf


@dataclass(frozen=True)
class FreshnessState:
    is_stale: bool
    hours_since_last_scrape: float
    last_scraped_at: Optional[datetime]

    @property
    def has_data(self) -> bool:
        return self.last_scraped_at is not None

    def to_dict(self) -> dict[str, Any]:
        hours = self.hours_since_last_scrape
        return {
            'isStale': self.is_stale,
            'lastScrapeTime': self.last_scraped_at.isoformat() if self.last_scraped_at else None,
            # JSON has no infinity
            'hoursSinceLastScrape': round(hours, 2) if math.isfinite(hours) else None,
        }


DEGRADED_FRESHNESS = FreshnessState(is_stale=False, hours_since_last_scrape=UNKNOWN_HOURS, last_scraped_at=None)


def evaluate_freshness(
    last_scraped_at: Optional[datetime],
    now: Optional[datetime] = None,
    unknown_hours: float = UNKNOWN_HOURS,
) -> FreshnessState:
    """Compute the freshness state for the newest scrape time.

    Args:
        last_scraped_at: Newest scrape timestamp, or None when there is no data.
        now: Clock reading to compare with; read from the system when omitted.
        unknown_hours: Value reported as elapsed hours when there is no data.
    """
    if last_scraped_at is None:
        return FreshnessState(is_stale=True, hours_since_last_scrape=unknown_hours, last_scraped_at=None)
    now = now or timezone.now()
    # A scraper clock ahead of ours must not produce negative ages
    hours = max(0.0, (now - last_scraped_at).total_seconds() / 3600)
    return FreshnessState(
        is_stale=hours > STALE_AFTER_HOURS,
        hours_since_last_scrape=hours,
        last_scraped_at=last_scraped_at,
    )


def _newest_scrape() -> Optional[datetime]:
    return HospitalWard.objects.aggregate(latest=Max('scraped_at'))['latest']


def latest_scrape_time() -> Optional[datetime]:
    """Newest ``scraped_at`` over all rows; None when empty or on failure."""
    try:
        return _newest_scrape()
    except DatabaseError as exc:
        logger.warning("Could not read last scrape time: %s", exc)
        return None


def current_freshness(now: Optional[datetime] = None) -> FreshnessState:
    """Freshness of the stored rows.

    A failing backend yields :data:`DEGRADED_FRESHNESS` (not stale, nothing
    known) so an advisory banner never turns into an error page.
    """
    try:
        latest = _newest_scrape()
    except DatabaseError as exc:
        logger.warning("Could not evaluate data freshness: %s", exc)
        return DEGRADED_FRESHNESS
    return evaluate_freshness(latest, now=now)
