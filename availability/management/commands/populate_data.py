"""
Management command to populate the database with demo data.

Ward rows go through the same import path as real scraper output, so a
success entry appears in the scraping log as well.
"""
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from availability.models import AIInsight
from availability.services.scrape_import import replace_ward_records

DEMO_HOSPITALS = [
    ('Szpital Wojewódzki im. Kopernika', 'Łódź'),
    ('Szpital Uniwersytecki', 'Kraków'),
    ('Szpital Miejski nr 2', 'Warszawa'),
    ('Szpital Powiatowy', 'Gdańsk'),
]

DEMO_WARDS = {
    'Kardiologia': ['12', '3', 'brak', '0'],
    'Chirurgia ogólna': ['5', '-2', '8', None],
    'Neurologia': ['1', '', '4', '2'],
    'Oddział Dziecięcy': ['7', '9', 'n/d', '11'],
}


class Command(BaseCommand):
    help = 'Populate database with demo ward data and an insight'

    def add_arguments(self, parser):
        parser.add_argument('--no-insight', action='store_true', help='Skip the demo insight')

    def handle(self, *args, **options):
        self.stdout.write('Creating demo ward records...')
        log = replace_ward_records(self.build_rows())
        self.stdout.write(f'Imported {log.records_inserted} ward rows')

        if not options['no_insight']:
            now = timezone.now()
            AIInsight.objects.create(
                insight_text='Najwięcej wolnych miejsc jest obecnie na oddziałach dziecięcych.',
                generated_at=now,
                expires_at=now + timedelta(hours=24),
            )
            self.stdout.write('Created demo insight')

        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def build_rows(self):
        rows = []
        for ward_name, places in DEMO_WARDS.items():
            for (hospital_name, district), raw in zip(DEMO_HOSPITALS, places):
                rows.append({
                    'wardName': ward_name,
                    'hospitalName': hospital_name,
                    'district': district,
                    'availablePlaces': raw,
                    'lastUpdated': timezone.localtime().strftime('%d.%m.%Y %H:%M'),
                })
        return rows
