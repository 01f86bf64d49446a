"""
Ward list: aggregation joined with the caller's favorites and freshness.
"""
from __future__ import annotations

from typing import Optional

from availability.serializers.query import WardsQuery
from .aggregation import AggregationBackend, DatabaseAggregationBackend, WardFilter
from .favorites import favorite_ward_names
from .freshness import current_freshness
from .pagination import paginate


def list_wards(user, query: WardsQuery, backend: Optional[AggregationBackend] = None) -> dict:
    """Return the paginated ward aggregates for ``user``.

    The favorite flag always reflects ``user``'s own favorites, so an
    authenticated user is required.

    Raises:
        DatabaseFailure: If wards or favorites cannot be read.
    """
    backend = backend or DatabaseAggregationBackend()
    ward_filter = WardFilter(
        search=query.search,
        favorite_ward_names=frozenset(favorite_ward_names(user)),
        favorites_only=query.favorites_only,
    )
    wards = backend.aggregate_wards(ward_filter)
    freshness = current_freshness()
    return paginate(
        [w.to_dict() for w in wards],
        limit=query.limit,
        offset=query.offset,
        lastScrapeTime=freshness.to_dict()['lastScrapeTime'],
        isStale=freshness.is_stale,
    )
