"""
URL mappings for the bed availability API.

Trailing slashes are omitted.  Ward names travel URL-encoded in the path
and are matched with the ``path`` converter, so a decoded ``/`` inside a
name (``Anestezjologia / OIT``) stays part of the name.
"""
from django.urls import path, include
from .views import favorites
from .views import health
from .views import hospitals
from .views import insights
from .views import logs
from .views import status
from .views import wards


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Wards
    path('api/wards', wards.wards),
    path('api/wards/<path:ward_name>/hospitals', hospitals.ward_hospitals),
    # Favorites of the signed-in user
    path('api/users/me/favorites', favorites.my_favorites),
    path('api/users/me/favorites/by-ward/<path:ward_name>', favorites.remove_my_favorite_by_ward),
    path('api/users/me/favorites/<uuid:favorite_id>', favorites.remove_my_favorite),
    # System
    path('api/status', status.system_status),
    path('api/insights/current', insights.current),
    path('api/logs/scraping', logs.scraping_logs),
]
