from math import isfinite

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .services import DEFAULT_RADIUS_KM


class CityQuerySerializer(serializers.Serializer):
    """
    Query parameters for city discovery.

    Both are optional; ``cities`` is a comma separated list and wins over ``city``.
    """

    city = serializers.CharField(required=False, allow_blank=True, help_text=_("Exact city name"))
    cities = serializers.CharField(required=False, allow_blank=True, help_text=_("Comma separated city names"))


class NearbyQuerySerializer(serializers.Serializer):
    """
    Query parameters for proximity discovery.

    Usage:
        serializer = NearbyQuerySerializer(data={"lat": 18.52, "lng": 73.85, "radius": 1})
    """

    lat = serializers.FloatField(min_value=-90, max_value=90, required=True, help_text=_("Latitude (-90 to 90)"))
    lng = serializers.FloatField(min_value=-180, max_value=180, required=True, help_text=_("Longitude (-180 to 180)"))
    radius = serializers.FloatField(
        min_value=0,
        required=False,
        default=DEFAULT_RADIUS_KM,
        help_text=_("Search radius in kilometers"),
    )

    def _validate_finite(self, value):
        if not isfinite(value):
            raise serializers.ValidationError(_("A finite number is required."))
        return value

    def validate_lat(self, value):
        return self._validate_finite(value)

    def validate_lng(self, value):
        return self._validate_finite(value)

    def validate_radius(self, value):
        return self._validate_finite(value)

    def validate(self, attrs):
        # A blank optional query parameter reaches DRF as absent; only a missing radius takes the default.
        if self.initial_data.get("radius", None) == "":
            raise serializers.ValidationError({"radius": _("A valid number is required.")})
        return attrs
