"""
Management command to clean up expired admin OTPs.
This command should be run periodically via cron or celery tasks.
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from user.models import AdminOTP


class Command(BaseCommand):
    help = "Delete admin OTPs whose expiry has passed"

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Show what would be deleted without actually deleting")

    def handle(self, *args, **options):
        expired = AdminOTP.objects.filter(expires_at__lte=timezone.now())
        count = expired.count()

        if count == 0:
            self.stdout.write(self.style.SUCCESS("No expired admin OTPs found."))
            return

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING(f"DRY RUN: Would delete {count} expired admin OTPs"))
            return

        deleted_count = AdminOTP.clear_expired()
        self.stdout.write(self.style.SUCCESS(f"Successfully deleted {deleted_count} expired admin OTPs"))
