"""
Query parameter contracts shared by the list endpoints.

Each serializer validates raw query parameters and ``save()`` returns a
fully defaulted, frozen parameter record.  Search and district text is
limited to letters (any alphabet, Polish diacritics included), digits,
spaces and hyphens; anything else is rejected rather than stripped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rest_framework import serializers

from availability.exceptions import ValidationFailed
from availability.serializers.fields import SafeTextField

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
DEFAULT_LOGS_LIMIT = 10

ORDER_PLACES_DESC = 'availablePlaces.desc'
ORDER_HOSPITAL_ASC = 'hospitalName.asc'


@dataclass(frozen=True)
class PaginationQuery:
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class WardsQuery:
    search: Optional[str] = None
    favorites_only: bool = False
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class HospitalsQuery:
    district: Optional[str] = None
    search: Optional[str] = None
    order: str = ORDER_PLACES_DESC
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class ScrapingLogsQuery:
    status: Optional[str] = None
    limit: int = DEFAULT_LOGS_LIMIT
    offset: int = 0


def _drop_blank(validated_data, *names):
    # `?search=` means the same as leaving the parameter out
    return {k: v for k, v in validated_data.items() if not (k in names and v == '')}


class PaginationQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=MAX_LIMIT, default=DEFAULT_LIMIT)
    offset = serializers.IntegerField(min_value=0, default=0)

    def create(self, validated_data):
        return PaginationQuery(**validated_data)


class WardsQuerySerializer(PaginationQuerySerializer):
    search = SafeTextField(min_length=1, max_length=100, required=False, allow_blank=True)
    favorites_only = serializers.BooleanField(default=False)

    def create(self, validated_data):
        return WardsQuery(**_drop_blank(validated_data, 'search'))


class HospitalsQuerySerializer(PaginationQuerySerializer):
    district = SafeTextField(max_length=100, required=False, allow_blank=True)
    search = SafeTextField(min_length=1, max_length=100, required=False, allow_blank=True)
    order = serializers.ChoiceField(choices=[ORDER_PLACES_DESC, ORDER_HOSPITAL_ASC], default=ORDER_PLACES_DESC)

    def create(self, validated_data):
        return HospitalsQuery(**_drop_blank(validated_data, 'district', 'search'))


class ScrapingLogsQuerySerializer(PaginationQuerySerializer):
    limit = serializers.IntegerField(min_value=1, max_value=MAX_LIMIT, default=DEFAULT_LOGS_LIMIT)
    status = serializers.ChoiceField(choices=['success', 'failure'], required=False)

    def create(self, validated_data):
        return ScrapingLogsQuery(**validated_data)


def parse_query(serializer_class, data):
    """Validate ``data`` with ``serializer_class`` and return its parameter record.

    Raises:
        ValidationFailed: With the first violated constraint as message.
    """
    s = serializer_class(data=data)
    if not s.is_valid():
        field, errors = next(iter(s.errors.items()))
        raise ValidationFailed(str(errors[0]), details=f"field: {field}")
    return s.save()
