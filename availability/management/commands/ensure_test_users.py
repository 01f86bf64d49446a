from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from rest_framework.authtoken.models import Token

TEST_USERS = ("demo", "tester")
TEST_PASSWORD = "bedwatch-demo"


class Command(BaseCommand):
    help = "Ensure demo users exist with a known password and print their API tokens (idempotent)."

    def handle(self, *args, **opts):
        User = get_user_model()
        for username in TEST_USERS:
            u, created = User.objects.get_or_create(username=username, defaults={"is_active": True})
            if created or not u.check_password(TEST_PASSWORD) or not u.is_active:
                u.set_password(TEST_PASSWORD)
                u.is_active = True
                u.save(update_fields=["password", "is_active"])
            token, _ = Token.objects.get_or_create(user=u)
            self.stdout.write(self.style.SUCCESS(f"ok: {username} Bearer {token.key}"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
