from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from availability.models import HospitalWard


@pytest.fixture(autouse=True)
def clear_cache():
    # Status payloads and throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username='anna', password='P@ssw0rd1')


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username='piotr', password='P@ssw0rd1')


@pytest.fixture
def client(user):
    c = APIClient()
    token = Token.objects.create(user=user)
    c.credentials(HTTP_AUTHORIZATION=f'Bearer {token.key}')
    return c


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def make_ward(db):
    def _make(ward_name, hospital_name, places='0', district=None, scraped_at=None):
        return HospitalWard.objects.create(
            ward_name=ward_name,
            hospital_name=hospital_name,
            available_places=places,
            district=district,
            scraped_at=scraped_at or timezone.now() - timedelta(hours=1),
        )
    return _make


@pytest.fixture
def sample_wards(make_ward):
    make_ward('Kardiologia', 'Szpital A', '15', district='Warszawa')
    make_ward('Kardiologia', 'Szpital B', '8', district='Kraków')
    make_ward('Kardiologia', 'Szpital C', '20', district='Warszawa')
    make_ward('Neurologia', 'Szpital A', 'brak', district='Warszawa')
    make_ward('Neurologia', 'Szpital B', '4', district='Kraków')
    make_ward('Chirurgia', 'Szpital A', '-2', district='Warszawa')
