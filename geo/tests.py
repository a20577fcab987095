import shutil
import tempfile
from io import BytesIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APITestCase

from producer.factories import ProductFactory

from .serializers import NearbyQuerySerializer
from .services import ProductDiscoveryService

TEST_MEDIA_ROOT = tempfile.mkdtemp()


class ParseCityListTestCase(TestCase):

    def test_parse_city_list(self):
        self.assertEqual(ProductDiscoveryService.parse_city_list(" Pune, ,Mumbai,Pune "), ["Pune", "Mumbai"])
        self.assertEqual(ProductDiscoveryService.parse_city_list(""), [])
        self.assertEqual(ProductDiscoveryService.parse_city_list(None), [])


class NearbyQuerySerializerTestCase(TestCase):

    def test_radius_defaults_to_five_km(self):
        serializer = NearbyQuerySerializer(data={"lat": 18.52, "lng": 73.85})
        self.assertTrue(serializer.is_valid())
        self.assertEqual(serializer.validated_data["radius"], 5)

    def test_blank_radius_is_rejected(self):
        serializer = NearbyQuerySerializer(data={"lat": 18.52, "lng": 73.85, "radius": ""})
        self.assertFalse(serializer.is_valid())
        self.assertIn("radius", serializer.errors)


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class NearbyProductServiceTestCase(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def test_nearby_annotates_distance(self):
        product = ProductFactory(latitude=18.5204, longitude=73.8567)
        results = ProductDiscoveryService().nearby(18.52, 73.85, radius_km=1)
        self.assertEqual(results, [product])
        self.assertAlmostEqual(results[0].distance.km, 0.72, delta=0.05)

    def test_known_distance(self):
        # Pune to Mumbai is roughly 120 km as the crow flies.
        mumbai = ProductFactory(latitude=19.0760, longitude=72.8777)
        self.assertEqual(ProductDiscoveryService().nearby(18.5204, 73.8567, radius_km=100), [])

        results = ProductDiscoveryService().nearby(18.5204, 73.8567, radius_km=150)
        self.assertEqual(results, [mumbai])
        self.assertAlmostEqual(results[0].distance.km, 120, delta=5)


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class NearbyProductsAPITestCase(APITestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.url = "/api/products/nearby"
        self.near = ProductFactory(latitude=18.5204, longitude=73.8567)
        self.nearer = ProductFactory(latitude=18.5201, longitude=73.8501)
        self.origin = ProductFactory(latitude=0, longitude=0)

    def ids(self, response):
        return [product["id"] for product in response.data]

    def test_nearby_within_radius_nearest_first(self):
        response = self.client.get(self.url, {"lat": 18.52, "lng": 73.85, "radius": 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(response), [self.nearer.pk, self.near.pk])

        distances = [product["distanceKm"] for product in response.data]
        self.assertEqual(distances, sorted(distances))
        self.assertTrue(all(distance <= 1 for distance in distances))

    def test_default_radius_is_five_km(self):
        ProductFactory(latitude=18.5600, longitude=73.85)  # ~4.4 km north
        far = ProductFactory(latitude=18.6000, longitude=73.85)  # ~8.9 km north
        response = self.client.get(self.url, {"lat": 18.52, "lng": 73.85})
        self.assertEqual(len(response.data), 3)
        self.assertNotIn(far.pk, self.ids(response))

    def test_results_grow_with_radius(self):
        small = set(self.ids(self.client.get(self.url, {"lat": 18.52, "lng": 73.85, "radius": 1})))
        large = set(self.ids(self.client.get(self.url, {"lat": 18.52, "lng": 73.85, "radius": 20000})))
        self.assertTrue(small <= large)
        self.assertIn(self.origin.pk, large)

    def test_zero_radius_matches_exact_point_only(self):
        response = self.client.get(self.url, {"lat": 0, "lng": 0, "radius": 0})
        self.assertEqual(self.ids(response), [self.origin.pk])
        self.assertEqual(response.data[0]["distanceKm"], 0)

    def test_nearby_across_antimeridian(self):
        across = ProductFactory(latitude=0, longitude=-179.99)
        response = self.client.get(self.url, {"lat": 0, "lng": 179.99, "radius": 5})
        self.assertEqual(self.ids(response), [across.pk])

    def test_nearby_around_pole(self):
        other_side = ProductFactory(latitude=89.99, longitude=180)
        response = self.client.get(self.url, {"lat": 89.99, "lng": 0, "radius": 5})
        self.assertEqual(self.ids(response), [other_side.pk])

    def test_missing_coordinates(self):
        response = self.client.get(self.url, {"lat": 18.52})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertIn("lng", response.data["errors"])

    def test_blank_radius(self):
        response = self.client.get(self.url, {"lat": 18.52, "lng": 73.85, "radius": ""})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("radius", response.data["errors"])

    def test_invalid_parameters(self):
        for params in (
            {"lat": "abc", "lng": 73.85},
            {"lat": 91, "lng": 73.85},
            {"lat": 18.52, "lng": 181},
            {"lat": 18.52, "lng": 73.85, "radius": -1},
            {"lat": 18.52, "lng": 73.85, "radius": ""},
            {"lat": "nan", "lng": 73.85},
            {"lat": 18.52, "lng": 73.85, "radius": "inf"},
        ):
            with self.subTest(params=params):
                response = self.client.get(self.url, params)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class ListedProductDiscoveryTestCase(APITestCase):
    """A product listed through add-product is found by a nearby search around its point."""

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        buffer = BytesIO()
        Image.new("RGB", (8, 8), color="red").save(buffer, format="PNG")
        response = self.client.post(
            "/api/add-product",
            {
                "name": "Onion",
                "cost": "30",
                "adminEmail": "seller@example.com",
                "adminName": "Seller",
                "city": "Pune",
                "image": SimpleUploadedFile("onion.png", buffer.getvalue(), content_type="image/png"),
                "lat": "18.52",
                "lng": "73.85",
            },
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product_id = response.data["product"]["id"]

    def test_found_at_its_location(self):
        response = self.client.get("/api/products/nearby?lat=18.52&lng=73.85&radius=1")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(self.product_id, [product["id"] for product in response.data])

    def test_not_found_at_origin(self):
        response = self.client.get("/api/products/nearby?lat=0&lng=0&radius=1")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn(self.product_id, [product["id"] for product in response.data])
