from django.contrib import admin
from django.utils.html import format_html

from .models import EmailNotification


@admin.register(EmailNotification)
class EmailNotificationAdmin(admin.ModelAdmin):
    list_display = ["subject", "recipient", "category", "reference", "status_badge", "sent_at", "created_at"]
    list_filter = ["category", "status", "created_at"]
    search_fields = ["recipient", "subject", "reference"]
    readonly_fields = ["id", "created_at", "updated_at", "sent_at"]

    def status_badge(self, obj):
        colors = {"pending": "orange", "sent": "green", "failed": "red"}
        return format_html('<span style="color: {};">{}</span>', colors.get(obj.status, "black"), obj.get_status_display())

    status_badge.short_description = "Status"
