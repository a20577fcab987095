import logging

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from main.exceptions import Conflict, InternalError, NotFound, Unauthorized
from notification.services import NotificationError

from .models import UserProfile
from .serializers import (
    AdminOTPRequestSerializer,
    LoginResponseSerializer,
    LoginSerializer,
    RegisterSerializer,
    VerifyAdminOTPSerializer,
)
from .services import (
    AccountNotFound,
    AccountService,
    AdminOTPService,
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidOTP,
)

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=RegisterSerializer)
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            AccountService.create_account(**serializer.validated_data, role=UserProfile.Role.USER)
        except EmailAlreadyRegistered as e:
            raise Conflict("Email already registered") from e

        return Response({"message": "User registered"})


class CreateAdminView(APIView):
    """
    Create an admin account directly, without the OTP step.
    """

    permission_classes = [AllowAny]

    @extend_schema(request=RegisterSerializer)
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            AccountService.create_account(**serializer.validated_data, role=UserProfile.Role.ADMIN)
        except EmailAlreadyRegistered as e:
            raise Conflict("Admin already exists") from e

        return Response({"success": True, "message": "Admin created successfully"})


class CreateOTPView(APIView):
    """
    Issue an admin OTP for an unregistered email
    """

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "admin_otp"

    @extend_schema(request=AdminOTPRequestSerializer)
    def post(self, request):
        serializer = AdminOTPRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            AdminOTPService().issue(serializer.validated_data["email"])
        except EmailAlreadyRegistered as e:
            raise Conflict("Admin already exists") from e
        except NotificationError as e:
            raise InternalError("Failed to send OTP") from e

        return Response({"success": True, "message": "OTP sent to your email. Please verify.", "otpSent": True})


class VerifyAdminOTPView(APIView):
    """
    Verify an admin OTP and create the admin account
    """

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "admin_otp"

    @extend_schema(request=VerifyAdminOTPSerializer)
    def post(self, request):
        serializer = VerifyAdminOTPSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            AdminOTPService().verify_and_create_admin(**serializer.validated_data)
        except InvalidOTP as e:
            raise Unauthorized(str(e)) from e
        except EmailAlreadyRegistered as e:
            raise Conflict("Admin already exists") from e

        return Response({"success": True, "message": "Admin created successfully after OTP verification"})


class LoginView(APIView):
    """
    Password login for users and admins alike.
    """

    permission_classes = [AllowAny]

    @extend_schema(request=LoginSerializer, responses=LoginResponseSerializer)
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = AccountService.authenticate(**serializer.validated_data)
        except AccountNotFound as e:
            raise NotFound("User not found") from e
        except InvalidCredentials as e:
            raise Unauthorized("Incorrect password") from e

        return Response({"success": True, "user": AccountService.public_profile(user)})
