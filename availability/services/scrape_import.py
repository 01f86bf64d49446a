"""
Wholesale replacement of ward records from one scraper run.

A run is a list of mappings using the scraper's camelCase keys
(``wardName``, ``hospitalName``, ``availablePlaces``, ``district``,
``wardLink``, ``lastUpdated``).  Every run is recorded as a
:class:`~availability.models.ScrapingLog`, including failed ones.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from django.core.cache import cache
from django.db import DatabaseError, transaction
from django.utils import timezone

from availability.models import HospitalWard, ScrapingLog
from .favorites import cleanup_orphaned_favorites
from .status import STATUS_CACHE_KEY

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ('wardName', 'hospitalName')


class InvalidScrapeRecord(ValueError):
    pass


def _text(value: Any, max_length: int) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text[:max_length] if text else None


def build_ward(item: Mapping[str, Any], scraped_at: datetime) -> HospitalWard:
    missing = [k for k in REQUIRED_KEYS if not _text(item.get(k), 500)]
    if missing:
        raise InvalidScrapeRecord(f"record is missing {', '.join(missing)}: {item!r}")
    return HospitalWard(
        ward_name=_text(item['wardName'], 255),
        hospital_name=_text(item['hospitalName'], 500),
        ward_link=_text(item.get('wardLink'), 2048),
        district=_text(item.get('district'), 255),
        available_places=_text(item.get('availablePlaces'), 50),
        last_updated=_text(item.get('lastUpdated'), 100),
        scraped_at=scraped_at,
    )


def _dedupe(wards: Iterable[HospitalWard]) -> list[HospitalWard]:
    # The last row for a (ward, hospital) pair wins
    by_key: dict[tuple[str, str], HospitalWard] = {}
    for hw in wards:
        by_key[(hw.ward_name, hw.hospital_name)] = hw
    return list(by_key.values())


def replace_ward_records(items: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> ScrapingLog:
    """Replace all ward rows with ``items`` and log the run.

    The replacement is atomic: on any failure the previous rows stay in
    place, a failure log is written and the error is re-raised.
    """
    started_at = now or timezone.now()
    try:
        wards = _dedupe(build_ward(item, started_at) for item in items)
        with transaction.atomic():
            HospitalWard.objects.all().delete()
            HospitalWard.objects.bulk_create(wards)
            orphans = cleanup_orphaned_favorites()
    except (InvalidScrapeRecord, DatabaseError) as exc:
        logger.error("Scrape import failed: %s", exc)
        ScrapingLog.objects.create(
            started_at=started_at,
            completed_at=max(timezone.now(), started_at),
            status=ScrapingLog.STATUS_FAILURE,
            error_message=str(exc),
        )
        cache.delete(STATUS_CACHE_KEY)
        raise

    log = ScrapingLog.objects.create(
        started_at=started_at,
        completed_at=max(timezone.now(), started_at),
        status=ScrapingLog.STATUS_SUCCESS,
        records_inserted=len(wards),
    )
    cache.delete(STATUS_CACHE_KEY)
    logger.info("Imported %d ward records, removed %d orphaned favorites", len(wards), orphans)
    return log
