"""
Parsing of the scraped ``availablePlaces`` text.

The scraper stores whatever the source page shows in the places column,
so the value may be empty, ``"N/A"``, ``"brak"``, a decimal or anything
else.  Only strict signed integers of up to nine digits are trusted;
every other value counts as ``0``.  This means "unknown" and "exactly
zero" cannot be told apart once parsed.
"""
from __future__ import annotations

import re
from typing import Optional

from django.db.models import Case, IntegerField, Value, When
from django.db.models.functions import Cast, Trim
from django.db.models.lookups import Regex

# ASCII digits only; ``\d`` would also accept other Unicode digit classes.
# At most nine digits, so any value fits a 32-bit integer column and sums of
# them never overflow a 64-bit SQL aggregate.
MAX_DIGITS = 9
INTEGER_PATTERN = rf'^-?[0-9]{{1,{MAX_DIGITS}}}$'
_INTEGER_RE = re.compile(INTEGER_PATTERN)


def parse_available_places(raw: Optional[str]) -> int:
    """Return the number of places encoded in ``raw`` or ``0``.

    >>> parse_available_places("12")
    12
    >>> parse_available_places(" -3 ")
    -3
    >>> parse_available_places("N/A")
    0
    """
    if raw is None:
        return 0
    text = str(raw).strip()
    if not text or not _INTEGER_RE.fullmatch(text):
        return 0
    return int(text)


def parsed_places_expression(field: str = 'available_places'):
    """ORM expression applying :func:`parse_available_places` in SQL."""
    trimmed = Trim(field)
    return Case(
        When(Regex(trimmed, INTEGER_PATTERN), then=Cast(trimmed, IntegerField())),
        default=Value(0),
        output_field=IntegerField(),
    )
