import logging

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from main.exceptions import InternalError, NotFound

from .models import Order
from .serializers import (
    BookOrderSerializer,
    OrderListQuerySerializer,
    OrderSearchQuerySerializer,
    OrderSerializer,
)
from .services import NotificationFailedError, OrderWorkflow, ProductMissingError, search_orders

logger = logging.getLogger(__name__)


class BookOrderView(APIView):
    """
    Place an order and email the buyer and the seller.

    The order is saved before the product is looked up, so a 404 or 500 from
    this endpoint still leaves an order row (status ``product_missing`` or
    ``notification_failed``) visible through ``/api/orders``.
    """

    permission_classes = [AllowAny]

    @extend_schema(request=BookOrderSerializer)
    def post(self, request):
        serializer = BookOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = OrderWorkflow().place_order(**serializer.validated_data)
        except ProductMissingError as e:
            raise NotFound(str(e)) from e
        except NotificationFailedError as e:
            raise InternalError(str(e)) from e

        return Response({"success": True, "message": "Order placed and emails sent", "orderId": order.pk})


class OrderListView(APIView):
    """Orders placed with an email address, newest first."""

    permission_classes = [AllowAny]

    @extend_schema(parameters=[OrderListQuerySerializer], responses=OrderSerializer(many=True))
    def get(self, request):
        query = OrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        orders = Order.objects.for_email(query.validated_data["email"]).newest_first()
        return Response({"orders": OrderSerializer(orders, many=True).data})


class OrderSearchView(APIView):
    """Orders of users whose name or email contains the query."""

    permission_classes = [AllowAny]

    @extend_schema(parameters=[OrderSearchQuerySerializer], responses=OrderSerializer(many=True))
    def get(self, request):
        query = OrderSearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        orders = search_orders(query.validated_data["query"])
        return Response({"orders": OrderSerializer(orders, many=True).data})
