import shutil
import tempfile
from decimal import Decimal
from smtplib import SMTPException
from unittest.mock import patch

from django.core import mail
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from notification.models import EmailNotification
from producer.factories import ProductFactory
from user.factories import UserProfileFactory

from .factories import OrderFactory
from .models import Order, OrderStatus
from .services import OrderWorkflow, ProductMissingError

TEST_MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class BookOrderAPITestCase(APITestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.url = "/api/book-order"
        self.product = ProductFactory(name="Tomato", cost=Decimal("40.50"), admin_email="seller@example.com", admin_name="Seller")
        self.data = {
            "name": "Buyer",
            "phone": "9800000000",
            "email": "buyer@example.com",
            "address": "12 MG Road, Pune",
            "item": {"_id": str(self.product.pk), "name": "Tomato", "cost": 40.5, "store": "Green Farm"},
        }

    def orders_for(self, email):
        return self.client.get("/api/orders", {"email": email}).data["orders"]

    def test_book_order_sends_both_emails(self):
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Order placed and emails sent")

        order = Order.objects.get(pk=response.data["orderId"])
        self.assertEqual(order.status, OrderStatus.CONFIRMED)
        self.assertEqual(order.product_id, str(self.product.pk))
        self.assertEqual(order.item_price, Decimal("40.50"))

        self.assertEqual(len(mail.outbox), 2)
        buyer_mail, seller_mail = mail.outbox
        self.assertEqual(buyer_mail.to, ["buyer@example.com"])
        self.assertEqual(buyer_mail.subject, "Order Confirmation")
        self.assertIn("Tomato", buyer_mail.body)
        self.assertEqual(seller_mail.to, ["seller@example.com"])
        self.assertEqual(seller_mail.subject, "New Order Received")
        self.assertIn("9800000000", seller_mail.body)

        self.assertEqual(
            EmailNotification.objects.filter(reference=f"order:{order.pk}", status=EmailNotification.Status.SENT).count(), 2
        )

    def test_item_snapshot_keeps_only_identifier_name_and_price(self):
        self.client.post(self.url, self.data, format="json")
        orders = self.orders_for("buyer@example.com")
        self.assertEqual(orders[0]["item"], {"productId": str(self.product.pk), "name": "Tomato", "priceAtOrder": 40.5})

    def test_missing_product_returns_404_but_keeps_order(self):
        self.data["item"]["_id"] = "999999"
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Product not found")
        self.assertEqual(len(mail.outbox), 0)

        orders = self.orders_for("buyer@example.com")
        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0]["status"], OrderStatus.PRODUCT_MISSING)

    def test_malformed_product_id_is_treated_as_missing(self):
        self.data["item"]["_id"] = "not-a-number"
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Order.objects.get().status, OrderStatus.PRODUCT_MISSING)

    @patch("notification.services.send_mail", side_effect=SMTPException("connection refused"))
    def test_notification_failure_returns_500_but_keeps_order(self, mock_send):
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["message"], "Order recorded but notification failed")
        self.assertEqual(mock_send.call_count, 1)

        order = Order.objects.get()
        self.assertEqual(order.status, OrderStatus.NOTIFICATION_FAILED)
        self.assertIn("connection refused", order.failure_reason)
        self.assertEqual(self.orders_for("buyer@example.com")[0]["status"], OrderStatus.NOTIFICATION_FAILED)

    @patch("notification.services.send_mail", side_effect=[1, SMTPException("mailbox full")])
    def test_seller_notification_failure(self, mock_send):
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(Order.objects.get().status, OrderStatus.NOTIFICATION_FAILED)
        self.assertEqual(EmailNotification.objects.filter(status=EmailNotification.Status.SENT).count(), 1)
        self.assertEqual(EmailNotification.objects.filter(status=EmailNotification.Status.FAILED).count(), 1)

    def test_resubmitting_creates_another_order(self):
        self.client.post(self.url, self.data, format="json")
        self.client.post(self.url, self.data, format="json")
        self.assertEqual(Order.objects.count(), 2)

    def test_item_without_identifier_is_rejected(self):
        self.data["item"] = {"name": "Tomato"}
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())

    def test_missing_buyer_fields_are_rejected(self):
        del self.data["address"]
        response = self.client.post(self.url, self.data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("address", response.data["errors"])


class OrderListAPITestCase(APITestCase):

    def test_orders_newest_first(self):
        older = OrderFactory(email="buyer@example.com")
        newer = OrderFactory(email="buyer@example.com")
        OrderFactory(email="someone@example.com")

        response = self.client.get("/api/orders", {"email": "buyer@example.com"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([order["id"] for order in response.data["orders"]], [newer.pk, older.pk])

    def test_unknown_email_has_no_orders(self):
        response = self.client.get("/api/orders", {"email": "ghost@example.com"})
        self.assertEqual(response.data, {"orders": []})

    def test_email_is_required(self):
        response = self.client.get("/api/orders")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "email: Email is required")


class OrderSearchAPITestCase(APITestCase):

    def setUp(self):
        UserProfileFactory(name="Ravi Kumar", user__email="ravi@example.com")
        UserProfileFactory(name="Meera", user__email="meera@shop.in")
        self.ravi_order = OrderFactory(email="ravi@example.com")
        self.meera_order = OrderFactory(email="meera@shop.in")
        OrderFactory(email="guest@example.com")

    def ids(self, response):
        return sorted(order["id"] for order in response.data["orders"])

    def test_search_by_name_is_case_insensitive(self):
        response = self.client.get("/api/search-orders", {"query": "ravi"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(response), [self.ravi_order.pk])

    def test_search_by_email_fragment(self):
        response = self.client.get("/api/search-orders", {"query": "SHOP.IN"})
        self.assertEqual(self.ids(response), [self.meera_order.pk])

    def test_search_finds_user_with_mixed_case_email_domain(self):
        self.client.post(
            "/api/register", {"name": "Alice", "email": "alice@X.COM", "password": "pw"}, format="json"
        )
        order = OrderFactory(email="alice@X.COM")

        response = self.client.get("/api/search-orders", {"query": "alice"})
        self.assertEqual(self.ids(response), [order.pk])

    def test_orders_of_unregistered_buyers_are_not_searched(self):
        response = self.client.get("/api/search-orders", {"query": "guest"})
        self.assertEqual(response.data["orders"], [])

    def test_query_is_required(self):
        response = self.client.get("/api/search-orders")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "query: Search query is required")


class OrderModelTestCase(TestCase):

    def test_terminal_status_cannot_change(self):
        order = OrderFactory(status=OrderStatus.CONFIRMED)
        with self.assertRaises(ValidationError):
            order.mark_notification_failed("late failure")

    def test_workflow_raises_for_missing_product(self):
        with self.assertRaises(ProductMissingError) as ctx:
            OrderWorkflow().place_order("Buyer", "1", "b@example.com", "addr", {"product_id": "42"})
        self.assertEqual(ctx.exception.order.status, OrderStatus.PRODUCT_MISSING)
