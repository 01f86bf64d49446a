from __future__ import annotations

from typing import Any

from django.db import DatabaseError

from availability.exceptions import DatabaseFailure
from availability.models import ScrapingLog
from availability.serializers.query import ScrapingLogsQuery
from .pagination import envelope


def format_log(log: ScrapingLog) -> dict[str, Any]:
    return {
        'id': str(log.id),
        'started_at': log.started_at.isoformat(),
        'completed_at': log.completed_at.isoformat() if log.completed_at else None,
        'status': log.status,
        'records_inserted': log.records_inserted,
        'records_updated': log.records_updated,
        'error_message': log.error_message,
    }


def list_scraping_logs(query: ScrapingLogsQuery) -> dict[str, Any]:
    qs = ScrapingLog.objects.order_by('-started_at')
    if query.status:
        qs = qs.filter(status=query.status)
    try:
        total = qs.count()
        rows = list(qs[query.offset:query.offset + query.limit])
    except DatabaseError as exc:
        raise DatabaseFailure('Failed to fetch scraping logs from database', details=str(exc)) from exc
    return envelope([format_log(log) for log in rows], total=total, limit=query.limit, offset=query.offset)
