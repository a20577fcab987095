import shutil
import tempfile
from io import BytesIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APITestCase

from .factories import ProductFactory
from .models import Product

TEST_MEDIA_ROOT = tempfile.mkdtemp()


def make_image(name="tomato.png"):
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color="red").save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class AddProductAPITestCase(APITestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.url = "/api/add-product"
        self.data = {
            "name": "Tomato",
            "cost": "40.50",
            "store": "Green Farm",
            "stock": "100",
            "category": "Vegetables",
            "adminEmail": "seller@example.com",
            "adminName": "Seller",
            "city": "Pune",
            "unit": "kg",
        }

    def test_add_product_with_location(self):
        response = self.client.post(
            self.url, {**self.data, "image": make_image(), "lat": "18.52", "lng": "73.85"}, format="multipart"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Product added successfully")

        product = response.data["product"]
        self.assertEqual(product["name"], "Tomato")
        self.assertEqual(product["adminEmail"], "seller@example.com")
        self.assertEqual(product["location"], {"type": "Point", "coordinates": [73.85, 18.52]})
        self.assertTrue(product["imageRef"].startswith("http://testserver/media/products/"))

        saved = Product.objects.get(pk=product["id"])
        self.assertAlmostEqual(saved.latitude, 18.52)
        self.assertAlmostEqual(saved.longitude, 73.85)

    def test_add_product_without_location_sits_at_origin(self):
        response = self.client.post(self.url, {**self.data, "image": make_image()}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["product"]["location"]["coordinates"], [0.0, 0.0])

    def test_add_product_without_image(self):
        response = self.client.post(self.url, self.data, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "image: Image upload failed")
        self.assertFalse(Product.objects.exists())

    def test_add_product_rejects_non_image_file(self):
        bogus = SimpleUploadedFile("notes.png", b"not an image", content_type="image/png")
        response = self.client.post(self.url, {**self.data, "image": bogus}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("image", response.data["errors"])

    def test_lat_without_lng_is_rejected(self):
        response = self.client.post(self.url, {**self.data, "image": make_image(), "lat": "18.52"}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Product.objects.exists())

    def test_out_of_range_coordinates_are_rejected(self):
        response = self.client.post(
            self.url, {**self.data, "image": make_image(), "lat": "91", "lng": "10"}, format="multipart"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("lat", response.data["errors"])

    def test_negative_cost_is_rejected(self):
        response = self.client.post(self.url, {**self.data, "cost": "-1", "image": make_image()}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class ProductListAPITestCase(APITestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.url = "/api/products"
        self.pune = ProductFactory(city="Pune")
        self.mumbai = ProductFactory(city="Mumbai")
        self.delhi = ProductFactory(city="Delhi")

    def ids(self, response):
        return sorted(product["id"] for product in response.data)

    def test_filter_by_city(self):
        response = self.client.get(self.url, {"city": "Pune"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(response), [self.pune.pk])

    def test_city_match_is_exact(self):
        response = self.client.get(self.url, {"city": "pune"})
        self.assertEqual(response.data, [])

    def test_filter_by_cities_is_a_union_without_duplicates(self):
        response = self.client.get(self.url, {"cities": "Pune, Mumbai,,Pune"})
        self.assertEqual(self.ids(response), sorted([self.pune.pk, self.mumbai.pk]))

    def test_cities_takes_precedence_over_city(self):
        response = self.client.get(self.url, {"city": "Delhi", "cities": "Mumbai"})
        self.assertEqual(self.ids(response), [self.mumbai.pk])

    def test_without_filter_returns_everything(self):
        response = self.client.get(self.url)
        self.assertEqual(self.ids(response), sorted([self.pune.pk, self.mumbai.pk, self.delhi.pk]))

        response = self.client.get(self.url, {"city": ""})
        self.assertEqual(len(response.data), 3)

    def test_product_representation(self):
        response = self.client.get(self.url, {"city": "Pune"})
        product = response.data[0]
        for key in ("id", "name", "cost", "store", "stock", "imageRef", "category", "adminEmail", "adminName", "city", "unit", "location"):
            self.assertIn(key, product)
        self.assertEqual(product["location"]["type"], "Point")
