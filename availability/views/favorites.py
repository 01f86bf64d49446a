"""
Favorites of the signed-in user.

Adding a duplicate answers 409 and removing a missing favorite answers
404; clients treat both as "already in the requested state".
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from availability.exceptions import NotFound, ValidationFailed, first_validation_error
from availability.serializers.favorites import AddFavoriteSerializer
from availability.serializers.query import PaginationQuerySerializer, parse_query
from availability.services.favorites import (
    add_favorite,
    format_favorite,
    list_favorites_with_stats,
    remove_favorite,
    remove_favorite_by_ward,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def my_favorites(request):
    if request.method == 'GET':
        query = parse_query(PaginationQuerySerializer, request.query_params)
        return Response(list_favorites_with_stats(request.user, query))

    s = AddFavoriteSerializer(data=request.data)
    if not s.is_valid():
        field, message = first_validation_error(s.errors)
        raise ValidationFailed(message, details=f"field: {field}" if field else None)
    fav = add_favorite(request.user, s.validated_data['ward_name'])
    return Response(format_favorite(fav), status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def remove_my_favorite_by_ward(request, ward_name: str):
    ward_name = ward_name.strip()
    if not ward_name:
        raise ValidationFailed('Ward name is required', details='field: wardName')
    if not remove_favorite_by_ward(request.user, ward_name):
        raise NotFound('Favorite not found')
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def remove_my_favorite(request, favorite_id):
    if not remove_favorite(request.user, favorite_id):
        raise NotFound('Favorite not found')
    return Response(status=status.HTTP_204_NO_CONTENT)
