import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class EmailNotification(models.Model):
    """
    Delivery record for one transactional email.

    The message body is deliberately not stored: OTP mails carry the code.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        SENT = "sent", _("Sent")
        FAILED = "failed", _("Failed")

    class Category(models.TextChoices):
        ORDER_CONFIRMATION = "order_confirmation", _("Order Confirmation")
        ORDER_FULFILLMENT = "order_fulfillment", _("Order Fulfillment Request")
        ADMIN_OTP = "admin_otp", _("Admin OTP")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.CharField(max_length=254, blank=True, db_index=True, verbose_name=_("Recipient"))
    subject = models.CharField(max_length=255, verbose_name=_("Subject"))
    category = models.CharField(max_length=30, choices=Category.choices, verbose_name=_("Category"))
    reference = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        verbose_name=_("Reference"),
        help_text=_("Object the email is about, e.g. 'order:42'"),
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    error_message = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "email_notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category", "status"], name="email_notif_cat_status_idx"),
        ]
        verbose_name = _("Email Notification")
        verbose_name_plural = _("Email Notifications")

    def __str__(self):
        return f"{self.subject} -> {self.recipient} ({self.status})"

    def mark_as_sent(self):
        """Mark notification as sent"""
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.save(update_fields=["status", "sent_at", "updated_at"])

    def mark_as_failed(self, error_message: str = ""):
        """Mark notification as failed"""
        self.status = self.Status.FAILED
        self.error_message = error_message
        self.save(update_fields=["status", "error_message", "updated_at"])
