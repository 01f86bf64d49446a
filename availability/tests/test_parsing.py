import pytest

from availability.models import HospitalWard
from availability.services.parsing import parse_available_places, parsed_places_expression


@pytest.mark.parametrize('raw, expected', [
    ('12', 12),
    (' 7 ', 7),
    ('0', 0),
    ('-3', -3),
    ('007', 7),
    ('999999999', 999999999),
    ('-999999999', -999999999),
])
def test_integers_are_parsed(raw, expected):
    assert parse_available_places(raw) == expected


@pytest.mark.parametrize('raw', [None, '', '   ', 'N/A', 'brak', '+5', '1.5', '1 2', '12a', '--1', '٣', '1234567890', '9223372036854775807'])
def test_anything_else_is_zero(raw):
    assert parse_available_places(raw) == 0


def test_database_expression_agrees_with_parser(db, make_ward):
    values = ['12', ' 7 ', '-3', 'N/A', '', '1.5', '+5', None, '999999999', '9223372036854775807']
    for i, raw in enumerate(values):
        make_ward('Test', f'Szpital {i}', raw)
    rows = HospitalWard.objects.annotate(parsed=parsed_places_expression()).values_list('available_places', 'parsed')
    for raw, parsed in rows:
        assert parsed == parse_available_places(raw), raw
