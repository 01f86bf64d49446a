"""
Favorite wards of a user.

Favorites are set membership keyed by ``(user, ward_name)``: adding an
existing pair is a :class:`~availability.exceptions.Conflict`, removing a
missing one reports ``False`` instead of failing.
"""
from __future__ import annotations

import logging
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction

from availability.exceptions import Conflict, DatabaseFailure
from availability.models import HospitalWard, UserFavorite
from availability.serializers.query import PaginationQuery
from .aggregation import DatabaseAggregationBackend
from .pagination import paginate

logger = logging.getLogger(__name__)


def format_favorite(fav: UserFavorite) -> dict[str, Any]:
    return {
        'id': str(fav.id),
        'user_id': fav.user_id,
        'ward_name': fav.ward_name,
        'created_at': fav.created_at.isoformat(),
    }


def favorite_ward_names(user) -> set[str]:
    try:
        return set(UserFavorite.objects.filter(user=user).values_list('ward_name', flat=True))
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to fetch favorites from database', details=str(exc)) from exc


def list_favorites_with_stats(user, query: PaginationQuery) -> dict[str, Any]:
    """Favorites, newest first, with live ward statistics.

    A favorite whose ward has no rows any more reports zero hospitals and
    zero places.
    """
    try:
        favorites = list(UserFavorite.objects.filter(user=user).order_by('-created_at', 'ward_name'))
        names = {f.ward_name for f in favorites}
        backend = DatabaseAggregationBackend()
        stats = {
            row['ward_name']: row
            for row in backend.grouped(HospitalWard.objects.filter(ward_name__in=names))
        } if names else {}
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to fetch favorites from database', details=str(exc)) from exc

    data = []
    for fav in favorites:
        row = stats.get(fav.ward_name, {})
        data.append({
            'id': str(fav.id),
            'wardName': fav.ward_name,
            'hospitalCount': row.get('hospital_count', 0),
            'totalPlaces': row.get('total_places') or 0,
            'createdAt': fav.created_at.isoformat(),
        })
    return paginate(data, limit=query.limit, offset=query.offset)


def add_favorite(user, ward_name: str) -> UserFavorite:
    """Create the favorite.

    Raises:
        Conflict: The user already has this ward as a favorite.
        DatabaseFailure: Any other database error.
    """
    try:
        with transaction.atomic():
            fav = UserFavorite.objects.create(user=user, ward_name=ward_name)
    except IntegrityError as exc:
        raise Conflict('This ward is already in your favorites') from exc
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to add favorite to database', details=str(exc)) from exc
    logger.info("User %s added favorite %r", user.pk, ward_name)
    return fav


def remove_favorite_by_ward(user, ward_name: str) -> bool:
    """Delete the user's favorite for ``ward_name``; False when there was none."""
    try:
        deleted, _ = UserFavorite.objects.filter(user=user, ward_name=ward_name).delete()
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to remove favorite from database', details=str(exc)) from exc
    return deleted > 0


def remove_favorite(user, favorite_id) -> bool:
    """Delete a favorite by id; only the owner's favorites are visible."""
    try:
        deleted, _ = UserFavorite.objects.filter(user=user, id=favorite_id).delete()
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to remove favorite from database', details=str(exc)) from exc
    return deleted > 0


def cleanup_orphaned_favorites() -> int:
    """Delete favorites whose ward name no longer appears in the ward rows."""
    existing = HospitalWard.objects.values('ward_name')
    deleted, _ = UserFavorite.objects.exclude(ward_name__in=existing).delete()
    if deleted:
        logger.info("Removed %d orphaned favorites", deleted)
    return deleted
