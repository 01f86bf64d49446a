from django.core.cache import cache
from django.core.management.base import BaseCommand
from django.utils import timezone

from availability.services.status import STATUS_CACHE_KEY, STATUS_CACHE_SECONDS, build_system_status


class Command(BaseCommand):
    help = "Recompute the system status and store it in the cache."

    def handle(self, *args, **options):
        now = timezone.now()
        payload = build_system_status()
        cache.set(STATUS_CACHE_KEY, payload, STATUS_CACHE_SECONDS)
        self.stdout.write(self.style.SUCCESS(f"Refreshed {STATUS_CACHE_KEY} at {now}"))
