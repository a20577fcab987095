import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth.models import User
from django.db import IntegrityError, transaction

from notification.models import EmailNotification
from notification.services import EmailNotificationService

from .models import AdminOTP, UserProfile

logger = logging.getLogger(__name__)


class AccountError(Exception):
    pass


class EmailAlreadyRegistered(AccountError):
    pass


class AccountNotFound(AccountError):
    pass


class InvalidCredentials(AccountError):
    pass


class InvalidOTP(AccountError):
    pass


class AccountService:
    """
    Account creation and password login.

    The email is stored verbatim as both ``User.username`` and ``User.email``,
    so uniqueness is enforced by the database and is case-sensitive.
    """

    @staticmethod
    def email_taken(email: str) -> bool:
        return User.objects.filter(username=email).exists()

    @classmethod
    def create_account(cls, name: str, email: str, password: str, city: str = "", role: str = UserProfile.Role.USER) -> User:
        if cls.email_taken(email):
            raise EmailAlreadyRegistered(email)

        try:
            with transaction.atomic():
                # Email kept verbatim; create_user would lowercase its domain.
                user = User(username=email, email=email)
                user.set_password(password)
                user.save()
                UserProfile.objects.create(user=user, name=name, city=city, role=role)
        except IntegrityError as e:
            raise EmailAlreadyRegistered(email) from e

        logger.info(f"Created {role} account {user.user_profile.account_id} for {email}")
        return user

    @staticmethod
    def authenticate(email: str, password: str) -> User:
        user = User.objects.filter(username=email).select_related("user_profile").first()
        if user is None:
            raise AccountNotFound(email)
        if not user.check_password(password):
            logger.warning(f"Failed login for {email}")
            raise InvalidCredentials(email)
        return user

    @staticmethod
    def public_profile(user: User) -> dict:
        profile = getattr(user, "user_profile", None)
        return {
            "id": user.pk,
            "accountId": str(profile.account_id) if profile else None,
            "name": profile.name if profile else user.get_full_name(),
            "email": user.email,
            "city": profile.city if profile else "",
            "role": profile.role if profile else UserProfile.Role.USER,
        }


class AdminOTPService:
    """
    OTP-gated admin provisioning.

    Usage:
        service = AdminOTPService()
        service.issue("owner@example.com")
        user = service.verify_and_create_admin("owner@example.com", "123456", name="Owner", password="...")

    The code is mailed to ``settings.ADMIN_OTP_APPROVER_EMAIL`` when one is
    configured, so an approver hands it out; otherwise it goes to the requester.
    """

    def __init__(self, notification_service: Optional[EmailNotificationService] = None):
        self.notification_service = notification_service or EmailNotificationService()
        self.ttl_seconds = getattr(settings, "ADMIN_OTP_TTL_SECONDS", 600)
        self.approver_email = getattr(settings, "ADMIN_OTP_APPROVER_EMAIL", "")

    def issue(self, email: str) -> AdminOTP:
        """
        Store and mail a fresh code.

        Raises:
            EmailAlreadyRegistered: an account already uses ``email``.
            NotificationError: the code could not be mailed. The stored code stays valid.
        """
        if AccountService.email_taken(email):
            raise EmailAlreadyRegistered(email)

        record = AdminOTP.issue_for_email(email, self.ttl_seconds)
        logger.info(f"Issued admin OTP for {email}, valid for {self.ttl_seconds}s")

        body = (
            "A request was made to create an admin account for:\n"
            f"Email: {email}\n\n"
            f"Use this OTP to approve: {record.otp}"
        )
        self.notification_service.send_email(
            recipient=self.approver_email or email,
            subject="Admin Account OTP Verification",
            body=body,
            category=EmailNotification.Category.ADMIN_OTP,
            reference=f"admin-otp:{email}"[:100],
        )
        return record

    def verify_and_create_admin(self, email: str, otp: str, name: str, password: str, city: str = "") -> User:
        """
        Consume the code and create the admin account.

        Raises:
            EmailAlreadyRegistered: an account already uses ``email``; the code is kept.
            InvalidOTP: the code does not match or has expired; the code is kept.
        """
        if AccountService.email_taken(email):
            raise EmailAlreadyRegistered(email)

        is_valid, message = AdminOTP.verify_and_consume(email, otp)
        if not is_valid:
            logger.warning(f"Admin OTP rejected for {email}: {message}")
            raise InvalidOTP(message)

        return AccountService.create_account(name=name, email=email, password=password, city=city, role=UserProfile.Role.ADMIN)
