import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from geo.serializers import CityQuerySerializer, NearbyQuerySerializer
from geo.services import ProductDiscoveryService

from .serializers import NearbyProductSerializer, ProductCreateSerializer, ProductSerializer

logger = logging.getLogger(__name__)


class AddProductView(APIView):
    """
    List a new product. Multipart form with an ``image`` file.
    """

    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=ProductCreateSerializer, responses=ProductSerializer)
    def post(self, request):
        serializer = ProductCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = serializer.save()

        logger.info(f"Product {product.pk} '{product.name}' listed by {product.admin_email} in {product.city}")
        return Response(
            {
                "success": True,
                "message": "Product added successfully",
                "product": ProductSerializer(product, context={"request": request}).data,
            },
            status=status.HTTP_200_OK,
        )


class ProductListView(APIView):
    """
    Products by city.

    GET /api/products?city=Pune
    GET /api/products?cities=Pune,Mumbai

    Without either parameter every product is returned.
    """

    permission_classes = [AllowAny]

    @extend_schema(parameters=[CityQuerySerializer], responses=ProductSerializer(many=True))
    def get(self, request):
        query = CityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        products = ProductDiscoveryService().search(
            city=query.validated_data.get("city"),
            cities=query.validated_data.get("cities"),
        )
        return Response(ProductSerializer(products, many=True, context={"request": request}).data)


class NearbyProductListView(APIView):
    """
    Products within a radius of a point, nearest first.

    GET /api/products/nearby?lat=18.52&lng=73.85&radius=1

    ``radius`` is in kilometers and defaults to 5.
    """

    permission_classes = [AllowAny]

    @extend_schema(parameters=[NearbyQuerySerializer], responses=NearbyProductSerializer(many=True))
    def get(self, request):
        query = NearbyQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        products = ProductDiscoveryService().nearby(
            latitude=query.validated_data["lat"],
            longitude=query.validated_data["lng"],
            radius_km=query.validated_data["radius"],
        )
        return Response(NearbyProductSerializer(products, many=True, context={"request": request}).data)
