from django.core.management.base import BaseCommand

from availability.services.favorites import cleanup_orphaned_favorites


class Command(BaseCommand):
    help = "Delete favorites whose ward no longer appears in the scraped data."

    def handle(self, *args, **options):
        removed = cleanup_orphaned_favorites()
        self.stdout.write(self.style.SUCCESS(f"Removed {removed} orphaned favorites"))
