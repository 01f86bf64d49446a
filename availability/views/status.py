from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from availability.services.status import get_system_status


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def system_status(request):
    """Freshness and counts of the scraped data (cached, refreshed every 5 minutes)."""
    return Response(get_system_status())
