from datetime import timedelta
from io import StringIO
from smtplib import SMTPException
from unittest.mock import patch

from django.contrib.auth.models import User
from django.core import mail
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from notification.models import EmailNotification

from .factories import AdminOTPFactory, UserFactory, UserProfileFactory
from .models import AdminOTP, UserProfile
from .tasks import purge_expired_admin_otps_task


class RegisterAPITestCase(APITestCase):

    def setUp(self):
        self.url = "/api/register"
        self.data = {"name": "Asha", "email": "asha@example.com", "password": "secret-pass", "city": "Pune"}

    def test_register_user(self):
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "User registered")

        user = User.objects.get(username="asha@example.com")
        self.assertEqual(user.user_profile.role, UserProfile.Role.USER)
        self.assertEqual(user.user_profile.city, "Pune")
        self.assertNotEqual(user.password, "secret-pass")
        self.assertTrue(user.check_password("secret-pass"))

    def test_register_existing_email_conflicts(self):
        self.client.post(self.url, self.data, format="json")
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["message"], "Email already registered")

    def test_register_conflicts_with_admin_account(self):
        UserProfileFactory(user__email="asha@example.com", role=UserProfile.Role.ADMIN)
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_register_missing_field(self):
        response = self.client.post(self.url, {"email": "asha@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertIn("name", response.data["errors"])


class CreateAdminAPITestCase(APITestCase):

    def test_create_admin_directly(self):
        data = {"name": "Owner", "email": "owner@example.com", "password": "pw"}
        response = self.client.post("/api/create-admin", data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertTrue(User.objects.get(username="owner@example.com").user_profile.is_admin)

        response = self.client.post("/api/create-admin", data, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["message"], "Admin already exists")


class LoginAPITestCase(APITestCase):

    def setUp(self):
        self.profile = UserProfileFactory(user__email="buyer@example.com", name="Buyer", city="Mumbai")
        self.url = "/api/login"

    def test_login_success(self):
        response = self.client.post(self.url, {"email": "buyer@example.com", "password": "testpass123"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])

        user = response.data["user"]
        self.assertEqual(user["email"], "buyer@example.com")
        self.assertEqual(user["name"], "Buyer")
        self.assertEqual(user["city"], "Mumbai")
        self.assertEqual(user["role"], "user")
        self.assertEqual(user["accountId"], str(self.profile.account_id))
        self.assertNotIn("password", user)

    def test_login_wrong_password(self):
        response = self.client.post(self.url, {"email": "buyer@example.com", "password": "nope"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Incorrect password")

    def test_login_unknown_email(self):
        response = self.client.post(self.url, {"email": "ghost@example.com", "password": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "User not found")

    def test_login_returns_email_as_registered(self):
        self.client.post(
            "/api/register", {"name": "Alice", "email": "alice@X.COM", "password": "pw"}, format="json"
        )
        response = self.client.post(self.url, {"email": "alice@X.COM", "password": "pw"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user"]["email"], "alice@X.COM")
        self.assertEqual(User.objects.get(username="alice@X.COM").email, "alice@X.COM")

    def test_login_email_is_case_sensitive(self):
        response = self.client.post(self.url, {"email": "BUYER@example.com", "password": "testpass123"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AdminOTPFlowTestCase(APITestCase):

    def setUp(self):
        cache.clear()
        self.email = "newadmin@example.com"
        self.verify_data = {"name": "New Admin", "email": self.email, "password": "pw", "city": "Pune"}

    def request_otp(self):
        return self.client.post("/api/create-otp", {"email": self.email}, format="json")

    def verify(self, otp):
        return self.client.post("/api/verify-admin-otp", {**self.verify_data, "otp": otp}, format="json")

    def test_request_otp_mails_code_to_requester(self):
        response = self.request_otp()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["otpSent"])

        record = AdminOTP.objects.get(email=self.email)
        self.assertEqual(len(record.otp), 6)
        self.assertTrue(100000 <= int(record.otp) <= 999999)
        self.assertFalse(record.is_expired)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.email])
        self.assertEqual(mail.outbox[0].subject, "Admin Account OTP Verification")
        self.assertIn(record.otp, mail.outbox[0].body)
        self.assertTrue(
            EmailNotification.objects.filter(
                category=EmailNotification.Category.ADMIN_OTP, status=EmailNotification.Status.SENT
            ).exists()
        )

    @override_settings(ADMIN_OTP_APPROVER_EMAIL="approver@example.com")
    def test_request_otp_mails_code_to_approver(self):
        self.request_otp()
        self.assertEqual(mail.outbox[0].to, ["approver@example.com"])
        self.assertIn(self.email, mail.outbox[0].body)

    def test_reissue_replaces_previous_code(self):
        AdminOTPFactory(email=self.email, otp="111111")
        with patch.object(AdminOTP, "generate_code", return_value="222222"):
            self.request_otp()
        self.assertEqual(AdminOTP.objects.filter(email=self.email).count(), 1)
        self.assertEqual(AdminOTP.objects.get(email=self.email).otp, "222222")

    def test_request_otp_for_registered_email_conflicts(self):
        UserFactory(email=self.email)
        response = self.request_otp()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(AdminOTP.objects.filter(email=self.email).exists())
        self.assertEqual(len(mail.outbox), 0)

    @patch("notification.services.send_mail", side_effect=SMTPException("connection refused"))
    def test_request_otp_send_failure(self, mock_send):
        response = self.request_otp()
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["message"], "Failed to send OTP")
        self.assertTrue(AdminOTP.objects.filter(email=self.email).exists())
        self.assertTrue(
            EmailNotification.objects.filter(recipient=self.email, status=EmailNotification.Status.FAILED).exists()
        )

    def test_verify_correct_code_creates_admin(self):
        record = AdminOTPFactory(email=self.email)
        response = self.verify(record.otp)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Admin created successfully after OTP verification")

        user = User.objects.get(username=self.email)
        self.assertTrue(user.user_profile.is_admin)
        self.assertTrue(user.check_password("pw"))
        self.assertFalse(AdminOTP.objects.filter(email=self.email).exists())

    def test_verify_wrong_code_keeps_entry(self):
        AdminOTPFactory(email=self.email, otp="123456")
        response = self.verify("654321")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Invalid OTP")
        self.assertTrue(AdminOTP.objects.filter(email=self.email).exists())
        self.assertFalse(User.objects.filter(username=self.email).exists())

        response = self.verify("123456")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_verify_code_is_compared_verbatim(self):
        AdminOTPFactory(email=self.email, otp="123456")
        response = self.verify(" 123456")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_verify_expired_code(self):
        AdminOTPFactory(email=self.email, otp="123456", expires_at=timezone.now() - timedelta(seconds=1))
        response = self.verify("123456")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "OTP has expired")
        self.assertFalse(User.objects.filter(username=self.email).exists())

    def test_verify_without_issued_code(self):
        response = self.verify("123456")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Invalid OTP")

    def test_code_cannot_be_used_twice(self):
        record = AdminOTPFactory(email=self.email)
        self.verify(record.otp)
        User.objects.filter(username=self.email).delete()

        response = self.verify(record.otp)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_verify_for_registered_email_conflicts(self):
        record = AdminOTPFactory(email=self.email)
        UserFactory(email=self.email)
        response = self.verify(record.otp)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(AdminOTP.objects.filter(email=self.email).exists())

    def test_otp_requests_are_throttled(self):
        with patch("rest_framework.throttling.ScopedRateThrottle.THROTTLE_RATES", {"admin_otp": "2/minute"}):
            self.request_otp()
            self.request_otp()
            response = self.request_otp()
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)


class AdminOTPModelTestCase(TestCase):

    def test_verify_and_consume_is_single_use(self):
        AdminOTPFactory(email="a@example.com", otp="123456")
        self.assertEqual(AdminOTP.verify_and_consume("a@example.com", "123456"), (True, "OTP verified"))
        self.assertEqual(AdminOTP.verify_and_consume("a@example.com", "123456"), (False, "Invalid OTP"))

    def test_codes_are_per_email(self):
        AdminOTPFactory(email="a@example.com", otp="123456")
        is_valid, message = AdminOTP.verify_and_consume("b@example.com", "123456")
        self.assertFalse(is_valid)
        self.assertTrue(AdminOTP.objects.filter(email="a@example.com").exists())

    def test_clear_expired(self):
        AdminOTPFactory(expires_at=timezone.now() - timedelta(minutes=1))
        AdminOTPFactory(expires_at=timezone.now() - timedelta(minutes=5))
        live = AdminOTPFactory()
        self.assertEqual(AdminOTP.clear_expired(), 2)
        self.assertEqual(list(AdminOTP.objects.all()), [live])


class CleanupAdminOTPsTestCase(TestCase):

    def setUp(self):
        AdminOTPFactory(expires_at=timezone.now() - timedelta(minutes=1))
        AdminOTPFactory()

    def test_command_dry_run(self):
        out = StringIO()
        call_command("cleanup_admin_otps", "--dry-run", stdout=out)
        self.assertIn("Would delete 1", out.getvalue())
        self.assertEqual(AdminOTP.objects.count(), 2)

    def test_command_deletes_expired(self):
        out = StringIO()
        call_command("cleanup_admin_otps", stdout=out)
        self.assertIn("Successfully deleted 1", out.getvalue())
        self.assertEqual(AdminOTP.objects.count(), 1)

    def test_purge_task(self):
        result = purge_expired_admin_otps_task.apply().get()
        self.assertEqual(result, {"status": "success", "deleted_count": 1, "remaining_count": 1})
