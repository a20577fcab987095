from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Order

# Identifier keys accepted for the ordered product, in order of preference.
PRODUCT_ID_KEYS = ("productId", "_id", "id")
PRICE_KEYS = ("priceAtOrder", "cost", "price")


class OrderItemSerializer(serializers.Serializer):
    """
    Snapshot of the ordered product.

    Clients that post the whole product object (``_id``, ``name``, ``cost``)
    are accepted; only the identifier, the name and the price are kept.
    """

    productId = serializers.CharField(source="product_id", max_length=64)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    priceAtOrder = serializers.DecimalField(
        source="price",
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
    )

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            raise serializers.ValidationError(_("item must be an object."))

        data = dict(data)
        for key in PRODUCT_ID_KEYS:
            if data.get(key) not in (None, ""):
                data["productId"] = data[key]
                break
        else:
            raise serializers.ValidationError({"productId": _("item must carry a product identifier.")})

        for key in PRICE_KEYS:
            if data.get(key) is not None:
                data["priceAtOrder"] = data[key]
                break

        snapshot = {key: data[key] for key in ("productId", "name", "priceAtOrder") if data.get(key) is not None}
        return super().to_internal_value(snapshot)


class BookOrderSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=30)
    email = serializers.EmailField()
    address = serializers.CharField()
    item = OrderItemSerializer()


class OrderSerializer(serializers.ModelSerializer):
    item = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Order
        fields = ["id", "name", "phone", "email", "address", "item", "status", "createdAt"]

    def get_item(self, obj):
        item = obj.item
        if item["priceAtOrder"] is not None:
            item["priceAtOrder"] = float(item["priceAtOrder"])
        return item


class OrderListQuerySerializer(serializers.Serializer):
    email = serializers.CharField(error_messages={"required": _("Email is required"), "blank": _("Email is required")})


class OrderSearchQuerySerializer(serializers.Serializer):
    query = serializers.CharField(
        error_messages={"required": _("Search query is required"), "blank": _("Search query is required")}
    )
