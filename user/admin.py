from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User as AuthUser

from .models import AdminOTP, UserProfile

if admin.site.is_registered(AuthUser):
    admin.site.unregister(AuthUser)


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = "User Profile"
    fk_name = "user"
    readonly_fields = ("account_id",)
    fields = ("name", "city", "role", "account_id")


@admin.register(AuthUser)
class UserAdmin(BaseUserAdmin):
    inlines = (UserProfileInline,)
    list_display = ("username", "email", "get_role", "get_city", "is_active", "date_joined")
    list_select_related = ("user_profile",)

    def get_role(self, obj):
        return obj.user_profile.get_role_display() if hasattr(obj, "user_profile") else "-"

    get_role.short_description = "Role"

    def get_city(self, obj):
        return obj.user_profile.city if hasattr(obj, "user_profile") else "-"

    get_city.short_description = "City"


@admin.register(AdminOTP)
class AdminOTPAdmin(admin.ModelAdmin):
    list_display = ["email", "expires_at", "created_at"]
    search_fields = ["email"]
    exclude = ["otp"]
    readonly_fields = ["email", "expires_at", "created_at", "updated_at"]
