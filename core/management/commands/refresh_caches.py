from django.core.management.base import BaseCommand
from django.utils import timezone

from core.services.notify import broadcast_cache_refresh
from core.services.reference import warm_reference_cache


class Command(BaseCommand):
    help = "Warm the reference data cache; broadcast WebSocket refresh event."

    def handle(self, *args, **options):
        now = timezone.now()
        keys_refreshed = warm_reference_cache()
        sent = broadcast_cache_refresh(keys_refreshed)
        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {len(keys_refreshed)} keys at {now}" + ("" if sent else " (no broadcast)")
        ))
