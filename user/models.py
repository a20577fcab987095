import secrets
import uuid
from datetime import timedelta

from django.contrib.auth.models import User
from django.db import IntegrityError, models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserProfile(models.Model):
    """
    Marketplace account details attached to a Django ``User``.

    The ``User`` row carries the login email (as ``username`` and ``email``)
    and the hashed password.

    Fields:
    - user: One-to-one relationship with the User model.
    - name: Display name.
    - city: Home city of the account.
    - role: ``user`` (buyer) or ``admin`` (lists products).
    - account_id: Public UUID of the account.
    """

    class Role(models.TextChoices):
        USER = "user", _("User")
        ADMIN = "admin", _("Admin")

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="user_profile", verbose_name=_("User"))
    name = models.CharField(max_length=255, verbose_name=_("Name"))
    city = models.CharField(max_length=100, blank=True, verbose_name=_("City"))
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.USER, db_index=True, verbose_name=_("Role"))
    account_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False, verbose_name=_("Account ID"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN


class AdminOTP(models.Model):
    """
    One-time code gating admin account creation.

    At most one live code per email: issuing again overwrites the previous one.
    Verification deletes the row in the same statement that checks it.
    """

    email = models.EmailField(unique=True, verbose_name=_("Email"))
    otp = models.CharField(max_length=6, verbose_name=_("OTP"))
    expires_at = models.DateTimeField(db_index=True, verbose_name=_("Expires At"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Admin OTP")
        verbose_name_plural = _("Admin OTPs")

    def __str__(self):
        return f"OTP for {self.email} (expires {self.expires_at:%Y-%m-%d %H:%M})"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()

    @staticmethod
    def generate_code():
        """Uniformly random 6-digit code, 100000-999999."""
        return str(100000 + secrets.randbelow(900000))

    @classmethod
    def issue_for_email(cls, email, ttl_seconds):
        """Store a fresh code for ``email``, replacing any unconsumed one."""
        code = cls.generate_code()
        expires_at = timezone.now() + timedelta(seconds=ttl_seconds)
        try:
            with transaction.atomic():
                record = cls.objects.update_or_create(email=email, defaults={"otp": code, "expires_at": expires_at})[0]
        except IntegrityError:
            # A concurrent issuance created the row first; last writer wins.
            cls.objects.filter(email=email).update(otp=code, expires_at=expires_at, updated_at=timezone.now())
            record = cls.objects.get(email=email)
        return record

    @classmethod
    def verify_and_consume(cls, email, otp):
        """
        Consume the code for ``email`` if ``otp`` matches it exactly and it has not expired.

        Returns:
            tuple: (is_valid, message). A failed check leaves the stored code untouched.
        """
        deleted, _details = cls.objects.filter(email=email, otp=otp, expires_at__gt=timezone.now()).delete()
        if deleted:
            return True, "OTP verified"

        if cls.objects.filter(email=email, expires_at__lte=timezone.now()).exists():
            return False, "OTP has expired"
        return False, "Invalid OTP"

    @classmethod
    def clear_expired(cls):
        deleted, _details = cls.objects.filter(expires_at__lte=timezone.now()).delete()
        return deleted
