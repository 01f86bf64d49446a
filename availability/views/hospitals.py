from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from availability.serializers.query import HospitalsQuerySerializer, parse_query
from availability.services.hospitals import list_hospitals_by_ward


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ward_hospitals(request, ward_name: str):
    """Hospitals with a given ward, ordered by available places by default."""
    query = parse_query(HospitalsQuerySerializer, request.query_params)
    return Response(list_hospitals_by_ward(ward_name.strip(), query))
