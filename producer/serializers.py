from decimal import Decimal
from math import isfinite

from django.contrib.gis.geos import Point
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    """
    Public product representation.

    ``location`` is GeoJSON, so coordinates are [longitude, latitude].
    """

    imageRef = serializers.SerializerMethodField()
    adminEmail = serializers.EmailField(source="admin_email", read_only=True)
    adminName = serializers.CharField(source="admin_name", read_only=True)
    location = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "cost",
            "store",
            "stock",
            "imageRef",
            "category",
            "adminEmail",
            "adminName",
            "city",
            "unit",
            "location",
            "createdAt",
        ]

    def get_imageRef(self, obj):
        if not obj.image:
            return None
        url = obj.image.url
        request = self.context.get("request")
        if request is not None and url.startswith("/"):
            return request.build_absolute_uri(url)
        return url

    def get_location(self, obj):
        return obj.geojson_location


class NearbyProductSerializer(ProductSerializer):
    distanceKm = serializers.SerializerMethodField()

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ["distanceKm"]

    def get_distanceKm(self, obj):
        distance = getattr(obj, "distance", None)
        return round(distance.km, 3) if distance is not None else None


class ProductCreateSerializer(serializers.Serializer):
    """
    Multipart payload of the add-product endpoint.

    ``lat``/``lng`` are optional but must be given together; an unlocated
    product sits at (0, 0).
    """

    name = serializers.CharField(max_length=255)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    store = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    stock = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    adminEmail = serializers.EmailField(source="admin_email")
    adminName = serializers.CharField(source="admin_name", max_length=255)
    city = serializers.CharField(max_length=100)
    unit = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    image = serializers.ImageField(
        error_messages={"required": _("Image upload failed"), "null": _("Image upload failed")},
    )
    lat = serializers.FloatField(source="latitude", min_value=-90, max_value=90, required=False)
    lng = serializers.FloatField(source="longitude", min_value=-180, max_value=180, required=False)

    def validate(self, attrs):
        has_lat = "latitude" in attrs
        has_lng = "longitude" in attrs
        if has_lat != has_lng:
            raise serializers.ValidationError(_("lat and lng must be provided together."))
        for field, param in (("latitude", "lat"), ("longitude", "lng")):
            if field in attrs and not isfinite(attrs[field]):
                raise serializers.ValidationError({param: _("A finite number is required.")})
        return attrs

    def create(self, validated_data):
        latitude = validated_data.pop("latitude", None)
        longitude = validated_data.pop("longitude", None)
        if latitude is not None:
            validated_data["location"] = Point(longitude, latitude, srid=4326)
        return Product.objects.create(**validated_data)
