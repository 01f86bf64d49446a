"""
Ward level aggregation of hospital rows.

A ward ("Kardiologia", "Chirurgia ogólna", ...) exists in many hospitals.
The ward list shows one line per ward name with the number of hospitals
that run it, the sum of their free places and the newest scrape time.

Two interchangeable backends compute the same result:

* :class:`RecordsAggregationBackend` works on rows already in memory and
  is a thin wrapper around :func:`aggregate_wards`;
* :class:`DatabaseAggregationBackend` pushes grouping and summing into a
  single SQL query.

Ordering is by total places descending, then ward name ascending.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional, Protocol

from django.db import DatabaseError
from django.db.models import Count, Max, Sum

from availability.exceptions import DatabaseFailure
from availability.models import HospitalWard
from .parsing import parse_available_places, parsed_places_expression

logger = logging.getLogger(__name__)


class WardRecord(Protocol):
    """Attributes the aggregator reads from a scraped row."""

    ward_name: str
    hospital_name: str
    available_places: Optional[str]
    scraped_at: datetime


@dataclass(frozen=True)
class HospitalWardRecord:
    """Plain, immutable scraped row (the ORM model satisfies the same shape)."""

    ward_name: str
    hospital_name: str
    available_places: Optional[str]
    scraped_at: datetime
    district: Optional[str] = None
    ward_link: Optional[str] = None
    last_updated: Optional[str] = None


@dataclass(frozen=True)
class WardAggregate:
    ward_name: str
    hospital_count: int
    total_places: int
    is_favorite: bool
    last_scraped_at: Optional[datetime]

    def to_dict(self) -> dict[str, Any]:
        return {
            'wardName': self.ward_name,
            'hospitalCount': self.hospital_count,
            'totalPlaces': self.total_places,
            'isFavorite': self.is_favorite,
            'lastScrapedAt': self.last_scraped_at.isoformat() if self.last_scraped_at else None,
        }


@dataclass(frozen=True)
class WardFilter:
    """What the caller wants to see; favorites belong to the requesting user."""

    search: Optional[str] = None
    favorite_ward_names: frozenset[str] = field(default_factory=frozenset)
    favorites_only: bool = False


def values_containing(queryset, field: str, text: str) -> list[str]:
    """Distinct values of ``field`` containing ``text``, ignoring case.

    Matching uses :meth:`str.casefold` in Python; SQL ``LIKE`` folds only
    ASCII on SQLite.
    """
    needle = text.casefold()
    values = queryset.order_by().values_list(field, flat=True).distinct()
    return [v for v in values if v is not None and needle in v.casefold()]


def _sort_key(ward: WardAggregate) -> tuple[int, str]:
    return (-ward.total_places, ward.ward_name)


def aggregate_wards(
    records: Iterable[WardRecord],
    search_text: Optional[str] = None,
    favorite_ward_names: Iterable[str] = (),
    favorites_only: bool = False,
) -> list[WardAggregate]:
    """Group ``records`` by ward name and summarise each group.

    Args:
        records: Scraped rows for any number of wards.
        search_text: Case-insensitive substring the ward name must contain.
        favorite_ward_names: Ward names the requesting user has favorited.
        favorites_only: Drop wards that are not favorites.

    Returns:
        Aggregates sorted by total places (desc) and ward name (asc).
        Empty input gives an empty list.
    """
    needle = search_text.casefold() if search_text else None
    favorites = frozenset(favorite_ward_names)

    hospitals: dict[str, set[str]] = {}
    totals: dict[str, int] = {}
    latest: dict[str, Optional[datetime]] = {}
    for record in records:
        name = record.ward_name
        if needle is not None and needle not in name.casefold():
            continue
        hospitals.setdefault(name, set()).add(record.hospital_name)
        totals[name] = totals.get(name, 0) + parse_available_places(record.available_places)
        seen = latest.get(name)
        if seen is None or (record.scraped_at is not None and record.scraped_at > seen):
            latest[name] = record.scraped_at

    wards = [
        WardAggregate(
            ward_name=name,
            hospital_count=len(hospitals[name]),
            total_places=totals[name],
            is_favorite=name in favorites,
            last_scraped_at=latest.get(name),
        )
        for name in hospitals
    ]
    if favorites_only:
        wards = [w for w in wards if w.is_favorite]
    wards.sort(key=_sort_key)
    return wards


class AggregationBackend(ABC):
    """Anything able to turn ward rows into :class:`WardAggregate` lists."""

    @abstractmethod
    def aggregate_wards(self, ward_filter: WardFilter) -> list[WardAggregate]:
        """Return the filtered, sorted ward aggregates.

        Raises:
            DatabaseFailure: If the underlying store cannot be queried.
        """


class RecordsAggregationBackend(AggregationBackend):
    """Aggregates a fixed collection of rows held in memory."""

    def __init__(self, records: Iterable[WardRecord]) -> None:
        self.records = list(records)

    def aggregate_wards(self, ward_filter: WardFilter) -> list[WardAggregate]:
        return aggregate_wards(
            self.records,
            search_text=ward_filter.search,
            favorite_ward_names=ward_filter.favorite_ward_names,
            favorites_only=ward_filter.favorites_only,
        )


class DatabaseAggregationBackend(AggregationBackend):
    """Aggregates :class:`HospitalWard` rows with one grouped query."""

    def __init__(self, queryset=None) -> None:
        self.queryset = queryset if queryset is not None else HospitalWard.objects.all()

    def grouped(self, queryset=None):
        qs = self.queryset if queryset is None else queryset
        return qs.values('ward_name').annotate(
            hospital_count=Count('hospital_name', distinct=True),
            total_places=Sum(parsed_places_expression()),
            last_scraped_at=Max('scraped_at'),
        ).order_by('-total_places', 'ward_name')

    def aggregate_wards(self, ward_filter: WardFilter) -> list[WardAggregate]:
        qs = self.queryset
        if ward_filter.favorites_only:
            qs = qs.filter(ward_name__in=ward_filter.favorite_ward_names)
        try:
            if ward_filter.search:
                qs = qs.filter(ward_name__in=values_containing(qs, 'ward_name', ward_filter.search))
            rows = list(self.grouped(qs))
        except DatabaseError as exc:
            logger.error("Ward aggregation query failed: %s", exc)
            raise DatabaseFailure('Failed to fetch wards from database', details=str(exc)) from exc
        return [
            WardAggregate(
                ward_name=row['ward_name'],
                hospital_count=row['hospital_count'],
                total_places=row['total_places'] or 0,
                is_favorite=row['ward_name'] in ward_filter.favorite_ward_names,
                last_scraped_at=row['last_scraped_at'],
            )
            for row in rows
        ]
