"""
Replace the ward records with the output of one scraper run.

Usage::

    python manage.py import_wards scrape.json

The file holds a JSON list of ward rows, or an object with the list
under ``"data"``.
"""
import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from availability.services.scrape_import import InvalidScrapeRecord, replace_ward_records


class Command(BaseCommand):
    help = 'Replace all ward records with the rows in a scraper JSON file'

    def add_arguments(self, parser):
        parser.add_argument('path', help='JSON file produced by the scraper')

    def handle(self, *args, **options):
        path = Path(options['path'])
        try:
            payload = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as exc:
            raise CommandError(f'Cannot read {path}: {exc}') from exc
        if isinstance(payload, dict):
            payload = payload.get('data')
        if not isinstance(payload, list):
            raise CommandError('Expected a JSON list of ward rows')

        try:
            log = replace_ward_records(payload)
        except (InvalidScrapeRecord, DatabaseError) as exc:
            raise CommandError(f'Import failed: {exc}') from exc
        self.stdout.write(self.style.SUCCESS(f'Imported {log.records_inserted} ward records'))
