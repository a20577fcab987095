from django.urls import path

from .views import CreateAdminView, CreateOTPView, LoginView, RegisterView, VerifyAdminOTPView

urlpatterns = [
    path("register", RegisterView.as_view(), name="register"),
    path("create-admin", CreateAdminView.as_view(), name="create-admin"),
    path("create-otp", CreateOTPView.as_view(), name="create-otp"),
    path("verify-admin-otp", VerifyAdminOTPView.as_view(), name="verify-admin-otp"),
    path("login", LoginView.as_view(), name="login"),
]
