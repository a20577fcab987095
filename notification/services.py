import logging
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail

from .models import EmailNotification

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a transactional email could not be handed to the mail transport."""

    def __init__(self, message: str, notification: Optional[EmailNotification] = None):
        super().__init__(message)
        self.notification = notification


class EmailNotificationService:
    """
    Transactional email over Django's configured mail backend.

    Each call is a single synchronous attempt. The SMTP backend honours
    ``settings.EMAIL_TIMEOUT`` so a hung transport surfaces as a failure instead
    of stalling the request forever. Failures raise ``NotificationError``; no
    retry is attempted.

    Usage:
        service = EmailNotificationService()
        service.send_email("buyer@example.com", "Order Confirmation", body,
                           category=EmailNotification.Category.ORDER_CONFIRMATION,
                           reference="order:42")
    """

    def __init__(self, from_email: Optional[str] = None):
        self.from_email = from_email or getattr(settings, "DEFAULT_FROM_EMAIL", "noreply@marketplace.local")

    def send_email(self, recipient: str, subject: str, body: str, category: str, reference: str = "") -> EmailNotification:
        notification = EmailNotification.objects.create(
            recipient=recipient or "",
            subject=subject,
            category=category,
            reference=reference,
        )

        if not recipient:
            notification.mark_as_failed("Recipient has no email address")
            logger.error(f"Email '{subject}' ({reference or category}) has no recipient")
            raise NotificationError("Recipient has no email address", notification)

        try:
            send_mail(
                subject=subject,
                message=body,
                from_email=self.from_email,
                recipient_list=[recipient],
                fail_silently=False,
            )
        except Exception as e:
            notification.mark_as_failed(str(e))
            logger.error(f"Email service error sending '{subject}' to {recipient}: {e}")
            raise NotificationError(f"Failed to send email to {recipient}: {e}", notification) from e

        notification.mark_as_sent()
        logger.info(f"Sent '{subject}' to {recipient} ({reference or category})")
        return notification
