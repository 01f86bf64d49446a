from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from availability.exceptions import DatabaseFailure
from availability.models import HospitalWard
from availability.services.aggregation import (
    DatabaseAggregationBackend,
    HospitalWardRecord,
    RecordsAggregationBackend,
    WardFilter,
    aggregate_wards,
)

T0 = datetime(2025, 1, 23, 8, 0, tzinfo=dt_timezone.utc)


def rec(ward, hospital, places, hours=0):
    return HospitalWardRecord(
        ward_name=ward, hospital_name=hospital, available_places=places, scraped_at=T0 + timedelta(hours=hours)
    )


RECORDS = [
    rec('Kardiologia', 'Szpital A', '15'),
    rec('Kardiologia', 'Szpital B', '8', hours=2),
    rec('Kardiologia', 'Szpital C', '20', hours=1),
    rec('Neurologia', 'Szpital A', 'brak'),
    rec('Neurologia', 'Szpital B', '4'),
    rec('Chirurgia', 'Szpital A', '-2'),
]


class TestAggregateWards:
    def test_groups_and_sums(self):
        wards = aggregate_wards(RECORDS)
        assert [w.ward_name for w in wards] == ['Kardiologia', 'Neurologia', 'Chirurgia']
        kardio = wards[0]
        assert kardio.hospital_count == 3
        assert kardio.total_places == 43
        assert kardio.last_scraped_at == T0 + timedelta(hours=2)
        assert wards[2].total_places == -2

    def test_empty_input(self):
        assert aggregate_wards([]) == []

    def test_hospital_count_is_distinct(self):
        wards = aggregate_wards([rec('Kardiologia', 'Szpital A', '1'), rec('Kardiologia', 'Szpital A', '2')])
        assert wards[0].hospital_count == 1
        assert wards[0].total_places == 3

    def test_search_is_case_insensitive_substring(self):
        wards = aggregate_wards(RECORDS, search_text='KARDIO')
        assert [w.ward_name for w in wards] == ['Kardiologia']

    def test_search_handles_polish_letters(self):
        records = [rec('Chirurgia ogólna', 'Szpital A', '1'), rec('Oddział Dziecięcy', 'Szpital A', '2')]
        assert [w.ward_name for w in aggregate_wards(records, search_text='OGÓLNA')] == ['Chirurgia ogólna']

    def test_favorite_flag(self):
        wards = aggregate_wards(RECORDS, favorite_ward_names={'Neurologia'})
        assert {w.ward_name: w.is_favorite for w in wards} == {
            'Kardiologia': False, 'Neurologia': True, 'Chirurgia': False,
        }

    def test_favorites_only(self):
        wards = aggregate_wards(RECORDS, favorite_ward_names={'Chirurgia', 'Gone'}, favorites_only=True)
        assert [w.ward_name for w in wards] == ['Chirurgia']

    def test_ties_are_ordered_by_ward_name(self):
        records = [rec('Pulmonologia', 'A', '5'), rec('Alergologia', 'A', '5'), rec('Ortopedia', 'A', '5')]
        assert [w.ward_name for w in aggregate_wards(records)] == ['Alergologia', 'Ortopedia', 'Pulmonologia']

    @pytest.mark.parametrize('split', range(len(RECORDS) + 1))
    def test_totals_combine_across_batches(self, split):
        whole = {w.ward_name: w for w in aggregate_wards(RECORDS)}
        combined: dict = {}
        for part in (RECORDS[:split], RECORDS[split:]):
            for w in aggregate_wards(part):
                total, latest = combined.get(w.ward_name, (0, None))
                latest = w.last_scraped_at if latest is None else max(latest, w.last_scraped_at)
                combined[w.ward_name] = (total + w.total_places, latest)
        assert combined == {name: (w.total_places, w.last_scraped_at) for name, w in whole.items()}

    def test_to_dict_uses_api_keys(self):
        d = aggregate_wards([rec('Kardiologia', 'A', '3')])[0].to_dict()
        assert d == {
            'wardName': 'Kardiologia',
            'hospitalCount': 1,
            'totalPlaces': 3,
            'isFavorite': False,
            'lastScrapedAt': T0.isoformat(),
        }


@pytest.mark.django_db
class TestDatabaseBackend:
    @pytest.fixture(autouse=True)
    def rows(self):
        for r in RECORDS:
            HospitalWard.objects.create(
                ward_name=r.ward_name,
                hospital_name=r.hospital_name,
                available_places=r.available_places,
                scraped_at=r.scraped_at,
            )

    @pytest.mark.parametrize('ward_filter', [
        WardFilter(),
        WardFilter(search='logia'),
        WardFilter(favorite_ward_names=frozenset({'Neurologia'})),
        WardFilter(favorite_ward_names=frozenset({'Neurologia', 'Chirurgia'}), favorites_only=True),
        WardFilter(search='nothing matches'),
    ])
    def test_agrees_with_in_memory_backend(self, ward_filter):
        expected = RecordsAggregationBackend(RECORDS).aggregate_wards(ward_filter)
        assert DatabaseAggregationBackend().aggregate_wards(ward_filter) == expected

    def test_tie_break_matches(self):
        HospitalWard.objects.create(ward_name='Alergologia', hospital_name='X', available_places='12', scraped_at=T0)
        HospitalWard.objects.create(ward_name='Zakaźny', hospital_name='X', available_places='12', scraped_at=T0)
        names = [w.ward_name for w in DatabaseAggregationBackend().aggregate_wards(WardFilter())]
        assert names.index('Alergologia') < names.index('Zakaźny')

    def test_search_folds_polish_capitals(self):
        HospitalWard.objects.create(ward_name='Chirurgia ogólna', hospital_name='X', available_places='3', scraped_at=T0)
        records = RECORDS + [rec('Chirurgia ogólna', 'X', '3')]
        ward_filter = WardFilter(search='OGÓLNA')
        wards = DatabaseAggregationBackend().aggregate_wards(ward_filter)
        assert [w.ward_name for w in wards] == ['Chirurgia ogólna']
        assert wards == RecordsAggregationBackend(records).aggregate_wards(ward_filter)

    def test_oversized_values_count_as_zero(self):
        for hospital in ('X', 'Y'):
            HospitalWard.objects.create(
                ward_name='Kardiologia', hospital_name=hospital, available_places='9223372036854775807', scraped_at=T0
            )
        records = RECORDS + [rec('Kardiologia', h, '9223372036854775807') for h in ('X', 'Y')]
        wards = DatabaseAggregationBackend().aggregate_wards(WardFilter())
        assert wards == RecordsAggregationBackend(records).aggregate_wards(WardFilter())
        assert wards[0].total_places == 43

    def test_database_error_is_wrapped(self, monkeypatch):
        from django.db import DatabaseError

        backend = DatabaseAggregationBackend()

        def broken(*args, **kwargs):
            raise DatabaseError('connection lost')

        monkeypatch.setattr(backend, 'grouped', broken)
        with pytest.raises(DatabaseFailure) as info:
            backend.aggregate_wards(WardFilter())
        assert info.value.code == 'DATABASE_ERROR'
