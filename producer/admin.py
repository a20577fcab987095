from django.contrib.gis import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.GISModelAdmin):
    list_display = ["name", "cost", "city", "category", "admin_email", "latitude", "longitude", "created_at"]
    list_filter = ["city", "category"]
    search_fields = ["name", "store", "admin_email", "admin_name", "city"]
    readonly_fields = ["created_at", "updated_at"]
