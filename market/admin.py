from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "email", "name", "item_name", "product_id", "item_price", "status", "created_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["email", "name", "phone", "item_name", "product_id"]
    readonly_fields = ["created_at", "updated_at"]
