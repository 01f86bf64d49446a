import json
from datetime import timedelta
from io import StringIO

import pytest
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone
from rest_framework.authtoken.models import Token

from availability.models import AIInsight, HospitalWard, ScrapingLog, UserFavorite
from availability.services.scrape_import import InvalidScrapeRecord, replace_ward_records
from availability.services.status import STATUS_CACHE_KEY, scraping_success_rate

pytestmark = pytest.mark.django_db

ROWS = [
    {'wardName': 'Kardiologia', 'hospitalName': 'Szpital A', 'availablePlaces': '5', 'district': 'Łódź'},
    {'wardName': 'Kardiologia', 'hospitalName': 'Szpital B', 'availablePlaces': 'brak'},
    {'wardName': 'Neurologia', 'hospitalName': 'Szpital A', 'availablePlaces': '2'},
]


class TestReplaceWardRecords:
    def test_replaces_rows_and_logs_success(self, make_ward):
        make_ward('Stary oddział', 'Szpital Z', '1')
        log = replace_ward_records(ROWS)
        assert log.status == 'success'
        assert log.records_inserted == 3
        assert log.completed_at >= log.started_at
        assert sorted(HospitalWard.objects.values_list('ward_name', flat=True)) == [
            'Kardiologia', 'Kardiologia', 'Neurologia',
        ]

    def test_orphaned_favorites_are_removed(self, user):
        UserFavorite.objects.create(user=user, ward_name='Kardiologia')
        UserFavorite.objects.create(user=user, ward_name='Zlikwidowany')
        replace_ward_records(ROWS)
        assert list(UserFavorite.objects.values_list('ward_name', flat=True)) == ['Kardiologia']

    def test_invalid_record_keeps_old_rows(self, make_ward):
        make_ward('Stary oddział', 'Szpital Z', '1')
        with pytest.raises(InvalidScrapeRecord):
            replace_ward_records(ROWS + [{'wardName': 'Bez szpitala'}])
        assert HospitalWard.objects.get().ward_name == 'Stary oddział'
        log = ScrapingLog.objects.get()
        assert log.status == 'failure'
        assert 'hospitalName' in log.error_message

    def test_cached_status_is_dropped(self):
        cache.set(STATUS_CACHE_KEY, {'totalWards': 0})
        replace_ward_records(ROWS)
        assert cache.get(STATUS_CACHE_KEY) is None

    def test_cached_status_is_dropped_on_failure(self):
        cache.set(STATUS_CACHE_KEY, {'totalWards': 0})
        with pytest.raises(InvalidScrapeRecord):
            replace_ward_records([{'wardName': 'Bez szpitala'}])
        assert cache.get(STATUS_CACHE_KEY) is None

    def test_duplicate_pairs_keep_last_row(self):
        replace_ward_records(ROWS + [{'wardName': 'Neurologia', 'hospitalName': 'Szpital A', 'availablePlaces': '9'}])
        assert HospitalWard.objects.get(ward_name='Neurologia').available_places == '9'


def test_import_wards_command(tmp_path):
    path = tmp_path / 'scrape.json'
    path.write_text(json.dumps({'data': ROWS}, ensure_ascii=False), encoding='utf-8')
    out = StringIO()
    call_command('import_wards', str(path), stdout=out)
    assert 'Imported 3 ward records' in out.getvalue()
    assert HospitalWard.objects.count() == 3


def test_import_wards_rejects_bad_file(tmp_path):
    path = tmp_path / 'scrape.json'
    path.write_text('{"data": 1}', encoding='utf-8')
    with pytest.raises(CommandError):
        call_command('import_wards', str(path))


def test_cleanup_favorites_command(user, make_ward):
    make_ward('Kardiologia', 'Szpital A', '1')
    UserFavorite.objects.create(user=user, ward_name='Kardiologia')
    UserFavorite.objects.create(user=user, ward_name='Zlikwidowany')
    out = StringIO()
    call_command('cleanup_favorites', stdout=out)
    assert 'Removed 1 orphaned favorites' in out.getvalue()
    assert UserFavorite.objects.count() == 1


def test_refresh_caches_command(make_ward):
    make_ward('Kardiologia', 'Szpital A', '1')
    call_command('refresh_caches', stdout=StringIO())
    assert cache.get(STATUS_CACHE_KEY)['totalWards'] == 1


def test_populate_data_command():
    call_command('populate_data', stdout=StringIO())
    assert HospitalWard.objects.values('ward_name').distinct().count() == 4
    assert AIInsight.objects.count() == 1
    assert ScrapingLog.objects.get().status == 'success'


def test_ensure_test_users_command():
    out = StringIO()
    call_command('ensure_test_users', stdout=out)
    call_command('ensure_test_users', stdout=out)
    assert Token.objects.count() == 2
    assert 'Bearer' in out.getvalue()


def test_success_rate_window():
    now = timezone.now()
    old = ScrapingLog.objects.create(started_at=now - timedelta(days=40), status='failure')
    ScrapingLog.objects.filter(pk=old.pk).update(created_at=now - timedelta(days=40))
    ScrapingLog.objects.create(started_at=now, status='success')
    assert scraping_success_rate() == 100.0
