from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from availability.services.insights import current_insight


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current(request):
    insight = current_insight()
    if insight is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(insight)
