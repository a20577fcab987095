import logging
from typing import Iterable, List, Optional

from django.contrib.gis.db.models.functions import Distance
from django.contrib.gis.geos import Point
from django.contrib.gis.measure import D
from django.db.models import QuerySet

from producer.models import Product

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 5


class ProductDiscoveryService:
    """
    Product discovery by city, by a set of cities, or by proximity.

    Proximity search is a geodesic ``distance_lte`` lookup on the spatially
    indexed ``Product.location``, annotated with the distance to the point.

    Usage:
        service = ProductDiscoveryService()
        products = service.search(city="Pune")
        products = service.search(cities="Pune, Mumbai")
        nearby = service.nearby(18.52, 73.85, radius_km=1)
    """

    def __init__(self, queryset: Optional[QuerySet] = None):
        self.queryset = queryset if queryset is not None else Product.objects.all()

    @staticmethod
    def parse_city_list(raw: Optional[str]) -> List[str]:
        """Split a comma separated city list, trimming tokens and dropping empty ones."""
        if not raw:
            return []
        cities = []
        for token in raw.split(","):
            token = token.strip()
            if token and token not in cities:
                cities.append(token)
        return cities

    def by_city(self, city: str) -> QuerySet:
        return self.queryset.filter(city=city)

    def by_cities(self, cities: Iterable[str]) -> QuerySet:
        return self.queryset.filter(city__in=list(cities))

    def search(self, city: Optional[str] = None, cities: Optional[str] = None) -> QuerySet:
        """
        Resolve a city discovery request.

        ``cities`` wins over ``city``. With neither filter every product is returned.
        """
        city_list = self.parse_city_list(cities)
        if city_list:
            return self.by_cities(city_list)
        if city:
            return self.by_city(city)
        return self.queryset.all()

    def nearby(self, latitude: float, longitude: float, radius_km: float = DEFAULT_RADIUS_KM) -> List[Product]:
        """
        Products within ``radius_km`` kilometres of a point.

        Args:
            latitude: Reference latitude
            longitude: Reference longitude
            radius_km: Search radius

        Returns:
            List of Product instances ordered nearest first, each annotated with ``distance``
        """
        point = Point(longitude, latitude, srid=4326)

        products = (
            self.queryset.filter(location__distance_lte=(point, D(km=radius_km)))
            .annotate(distance=Distance("location", point))
            .order_by("distance", "id")
        )

        matches = list(products)
        logger.debug(f"Nearby search ({latitude}, {longitude}) r={radius_km}km matched {len(matches)} products")
        return matches
