# geo/apps.py
"""
Django app configuration for geographic product discovery.
"""

from django.apps import AppConfig


class GeoConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "geo"
    verbose_name = "Geographic Product Discovery"
