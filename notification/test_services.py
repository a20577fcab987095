"""
Test cases for the transactional email service
"""

from smtplib import SMTPException
from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings

from .models import EmailNotification
from .services import EmailNotificationService, NotificationError


class EmailNotificationServiceTests(TestCase):
    """Test email notification service"""

    def setUp(self):
        self.service = EmailNotificationService(from_email="shop@example.com")

    def test_send_email_success(self):
        """Test successful email sending"""
        notification = self.service.send_email(
            recipient="buyer@example.com",
            subject="Order Confirmation",
            body="Your order has been placed.",
            category=EmailNotification.Category.ORDER_CONFIRMATION,
            reference="order:1",
        )

        self.assertEqual(notification.status, EmailNotification.Status.SENT)
        self.assertIsNotNone(notification.sent_at)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].from_email, "shop@example.com")
        self.assertEqual(mail.outbox[0].to, ["buyer@example.com"])
        self.assertEqual(mail.outbox[0].body, "Your order has been placed.")

    @patch("notification.services.send_mail")
    def test_send_email_failure(self, mock_send_mail):
        """Test email sending failure"""
        mock_send_mail.side_effect = SMTPException("SMTP server unavailable")

        with self.assertRaises(NotificationError) as ctx:
            self.service.send_email(
                recipient="buyer@example.com",
                subject="Order Confirmation",
                body="Body",
                category=EmailNotification.Category.ORDER_CONFIRMATION,
            )

        notification = ctx.exception.notification
        notification.refresh_from_db()
        self.assertEqual(notification.status, EmailNotification.Status.FAILED)
        self.assertIn("SMTP server unavailable", notification.error_message)
        self.assertIsNone(notification.sent_at)

    def test_send_email_without_recipient(self):
        """Test that a blank recipient fails without touching the transport"""
        with self.assertRaises(NotificationError):
            self.service.send_email(
                recipient="",
                subject="New Order Received",
                body="Body",
                category=EmailNotification.Category.ORDER_FULFILLMENT,
            )

        self.assertEqual(len(mail.outbox), 0)
        self.assertEqual(EmailNotification.objects.get().status, EmailNotification.Status.FAILED)

    @override_settings(DEFAULT_FROM_EMAIL="noreply@shop.example")
    def test_default_sender(self):
        """Test that the configured default sender is used"""
        EmailNotificationService().send_email(
            recipient="buyer@example.com",
            subject="Subject",
            body="Body",
            category=EmailNotification.Category.ADMIN_OTP,
        )
        self.assertEqual(mail.outbox[0].from_email, "noreply@shop.example")

    def test_body_is_not_stored(self):
        self.service.send_email(
            recipient="approver@example.com",
            subject="Admin Account OTP Verification",
            body="Use this OTP to approve: 123456",
            category=EmailNotification.Category.ADMIN_OTP,
        )
        notification = EmailNotification.objects.get()
        self.assertNotIn("123456", " ".join([notification.subject, notification.reference, notification.error_message]))
