from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from django.db import DatabaseError
from django.utils import timezone

from availability.models import AIInsight

logger = logging.getLogger(__name__)


def current_insight(now: Optional[datetime] = None) -> Optional[dict[str, Any]]:
    """Newest insight that has not expired yet, or None.

    Failures are logged and reported as "no insight"; the banner is optional.
    """
    now = now or timezone.now()
    try:
        insight = AIInsight.objects.filter(expires_at__gt=now).order_by('-generated_at').first()
    except DatabaseError as exc:
        logger.warning("Could not read current insight: %s", exc)
        return None
    if insight is None:
        return None
    return {
        'insight_text': insight.insight_text,
        'generated_at': insight.generated_at.isoformat(),
        'expires_at': insight.expires_at.isoformat(),
    }
