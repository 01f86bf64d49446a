from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from availability.serializers.query import ScrapingLogsQuerySerializer, parse_query
from availability.services.logs import list_scraping_logs


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def scraping_logs(request):
    query = parse_query(ScrapingLogsQuerySerializer, request.query_params)
    return Response(list_scraping_logs(query))
