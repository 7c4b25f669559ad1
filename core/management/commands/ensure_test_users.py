# core/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand

from core.models import User

TEST_SET = [
    ("admin1", "admin1@medplan.local", User.ROLE_ADMIN),
    ("lector1", "lector1@medplan.local", User.ROLE_READONLY),
]


class Command(BaseCommand):
    help = "Ensure test users exist with login access and password=123456 (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    def handle(self, *args, **opts):
        for username, email, role in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"email": email, "full_name": username, "role": role, "is_active": True},
            )
            # reset password, active flag and role on every run
            u.set_password(opts["password"])
            u.role = role
            u.is_active = True
            u.save(update_fields=["password", "role", "is_active", "updated_at"])
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
