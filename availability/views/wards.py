"""Ward summaries for the signed-in user."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from availability.serializers.query import WardsQuerySerializer, parse_query
from availability.services.wards import list_wards


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wards(request):
    query = parse_query(WardsQuerySerializer, request.query_params)
    return Response(list_wards(request.user, query))
