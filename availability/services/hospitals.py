from __future__ import annotations

from typing import Any

from django.db import DatabaseError

from availability.exceptions import DatabaseFailure, NotFound
from availability.models import HospitalWard
from availability.serializers.query import ORDER_HOSPITAL_ASC, HospitalsQuery
from .aggregation import values_containing
from .pagination import envelope
from .parsing import parsed_places_expression


def format_hospital(hw: HospitalWard) -> dict[str, Any]:
    return {
        'id': str(hw.id),
        'wardName': hw.ward_name,
        'wardLink': hw.ward_link,
        'district': hw.district,
        'hospitalName': hw.hospital_name,
        'availablePlaces': hw.available_places,
        'availablePlacesParsed': hw.parsed_places,
        'lastUpdated': hw.last_updated,
        'scrapedAt': hw.scraped_at.isoformat(),
    }


def ward_exists(ward_name: str) -> bool:
    try:
        return HospitalWard.objects.filter(ward_name=ward_name).exists()
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to check ward in database', details=str(exc)) from exc


def list_hospitals_by_ward(ward_name: str, query: HospitalsQuery) -> dict[str, Any]:
    """Hospitals running ``ward_name``, filtered, ordered and paginated.

    Places are ordered numerically on the parsed value, never on the raw
    text, so ``"10"`` sorts above ``"9"``.

    Raises:
        NotFound: No hospital has this ward at all.
        DatabaseFailure: The query failed.
    """
    qs = HospitalWard.objects.filter(ward_name=ward_name)
    if query.district:
        qs = qs.filter(district=query.district)
    if query.order == ORDER_HOSPITAL_ASC:
        qs = qs.order_by('hospital_name', 'id')
    else:
        qs = qs.annotate(places=parsed_places_expression()).order_by('-places', 'hospital_name', 'id')

    try:
        if query.search:
            qs = qs.filter(hospital_name__in=values_containing(qs, 'hospital_name', query.search))
        total = qs.count()
        rows = list(qs[query.offset:query.offset + query.limit])
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to fetch hospitals from database', details=str(exc)) from exc

    # Only an empty result needs the extra existence check
    if total == 0 and not ward_exists(ward_name):
        raise NotFound(f"Ward '{ward_name}' not found")
    return envelope([format_hospital(hw) for hw in rows], total=total, limit=query.limit, offset=query.offset)
