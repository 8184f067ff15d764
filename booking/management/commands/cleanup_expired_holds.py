"""
cleanup_expired_holds.py
------------------------
Django management command to delete holds whose expires_at has passed.

Usage:
    python manage.py cleanup_expired_holds

Behavior:
- Storage hygiene only. Availability already ignores expired holds, so it
  does not matter how often (or whether) this runs. Suitable for cron.
"""

from django.core.management.base import BaseCommand

from booking.services.hold_manager import HoldManager


class Command(BaseCommand):
    help = "Delete booking holds that have expired."

    def handle(self, *args, **options):
        deleted = HoldManager().cleanup_expired_holds()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} expired hold(s)."))
