"""
System status: freshness, counts and the scraper success KPI.

Status is advisory.  Each figure degrades to a neutral default when the
database cannot answer, and the combined payload is cached for five
minutes.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, TypeVar

from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone

from availability.models import HospitalWard, ScrapingLog
from .freshness import current_freshness

logger = logging.getLogger(__name__)

STATUS_CACHE_KEY = 'status:system'
STATUS_CACHE_SECONDS = 300
SUCCESS_RATE_DAYS = 30

T = TypeVar('T')


def _or_default(read: Callable[[], T], default: T, what: str) -> T:
    try:
        return read()
    except DatabaseError as exc:
        logger.warning("Status figure %s unavailable: %s", what, exc)
        return default


def count_unique_wards() -> int:
    return HospitalWard.objects.values('ward_name').distinct().count()


def count_unique_hospitals() -> int:
    return HospitalWard.objects.values('hospital_name').distinct().count()


def scraping_success_rate(days: int = SUCCESS_RATE_DAYS, now: Optional[datetime] = None) -> float:
    """Percentage of successful scraper runs in the last ``days`` days.

    Rounded to two decimals; ``0`` when there were no runs.
    """
    since = (now or timezone.now()) - timedelta(days=days)
    logs = ScrapingLog.objects.filter(created_at__gt=since)
    total = logs.count()
    if total == 0:
        return 0.0
    ok = logs.filter(status=ScrapingLog.STATUS_SUCCESS).count()
    return round(ok * 100.0 / total, 2)


def build_system_status() -> dict[str, Any]:
    freshness = current_freshness()
    return {
        **freshness.to_dict(),
        'totalWards': _or_default(count_unique_wards, 0, 'totalWards'),
        'totalHospitals': _or_default(count_unique_hospitals, 0, 'totalHospitals'),
        'scrapingSuccessRate30d': _or_default(scraping_success_rate, 0.0, 'scrapingSuccessRate30d'),
    }


def get_system_status() -> dict[str, Any]:
    cached = cache.get(STATUS_CACHE_KEY)
    if cached:
        return cached
    payload = build_system_status()
    cache.set(STATUS_CACHE_KEY, payload, STATUS_CACHE_SECONDS)
    return payload
