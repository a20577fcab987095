"""
Celery tasks for account housekeeping.
"""

import logging

from celery import shared_task

from .models import AdminOTP

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def purge_expired_admin_otps_task(self):
    """
    Delete admin OTPs whose expiry has passed.

    Returns:
        dict: Task execution results
    """
    try:
        deleted_count = AdminOTP.clear_expired()
        remaining_count = AdminOTP.objects.count()
        logger.info(f"Purged {deleted_count} expired admin OTPs. {remaining_count} remaining.")
        return {"status": "success", "deleted_count": deleted_count, "remaining_count": remaining_count}
    except Exception as exc:
        logger.error(f"Admin OTP purge failed: {exc}")
        raise self.retry(exc=exc, countdown=60)
