from django.utils.translation import gettext_lazy as _
from rest_framework import serializers


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=150)
    password = serializers.CharField(write_only=True, trim_whitespace=False, style={"input_type": "password"})
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class AdminOTPRequestSerializer(serializers.Serializer):
    """
    Only ``email`` is used to issue the code; the other registration fields
    are accepted for client compatibility and must be sent again on verification.
    """

    email = serializers.EmailField(max_length=150)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    password = serializers.CharField(
        write_only=True, required=False, allow_blank=True, trim_whitespace=False, style={"input_type": "password"}
    )
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)


class VerifyAdminOTPSerializer(RegisterSerializer):
    # Compared verbatim against the stored code.
    otp = serializers.CharField(trim_whitespace=False, help_text=_("6-digit code from the OTP email"))


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False, style={"input_type": "password"})


class UserPublicSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    accountId = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    email = serializers.EmailField()
    city = serializers.CharField(allow_blank=True)
    role = serializers.CharField()


class LoginResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    user = UserPublicSerializer()
