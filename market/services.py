import logging
from typing import Optional

from django.contrib.auth.models import User
from django.db.models import Q

from notification.models import EmailNotification
from notification.services import EmailNotificationService, NotificationError
from producer.models import Product

from .models import Order

logger = logging.getLogger(__name__)

# Largest id that still fits a signed 64-bit primary key column.
MAX_PRODUCT_ID_DIGITS = 18


class OrderWorkflowError(Exception):
    """Base error of the order placement workflow. The order has already been saved."""

    def __init__(self, message: str, order: Order):
        super().__init__(message)
        self.order = order


class ProductMissingError(OrderWorkflowError):
    pass


class NotificationFailedError(OrderWorkflowError):
    pass


class OrderWorkflow:
    """
    Place an order and notify the buyer and the seller.

    Steps:
    1. Save the order as ``pending``.
    2. Look up the product named by the item snapshot. Missing product:
       the order becomes ``product_missing`` and ``ProductMissingError`` is raised.
    3. Email the buyer a confirmation, then the seller a fulfillment request.
       A failed send makes the order ``notification_failed`` and raises
       ``NotificationFailedError``; the seller mail is skipped when the buyer
       mail fails.
    4. Otherwise the order becomes ``confirmed``.

    The order row is never deleted, so every outcome stays queryable by the
    buyer's email. Resubmitting the same order creates another row.
    """

    def __init__(self, notification_service: Optional[EmailNotificationService] = None):
        self.notification_service = notification_service or EmailNotificationService()

    def place_order(self, name: str, phone: str, email: str, address: str, item: dict) -> Order:
        order = Order.objects.create(
            name=name,
            phone=phone,
            email=email,
            address=address,
            product_id=item["product_id"],
            item_name=item.get("name") or "",
            item_price=item.get("price"),
        )
        logger.info(f"Order {order.pk} saved as pending for {email} (product {order.product_id})")

        product = self.find_product(order.product_id)
        if product is None:
            order.mark_product_missing()
            logger.warning(f"Order {order.pk} references missing product {order.product_id}")
            raise ProductMissingError("Product not found", order)

        if not order.item_name:
            order.item_name = product.name
        if order.item_price is None:
            order.item_price = product.cost

        try:
            self.notify_buyer(order)
            self.notify_seller(order, product)
        except NotificationError as e:
            order.mark_notification_failed(str(e))
            logger.error(f"Order {order.pk} saved but notification failed: {e}")
            raise NotificationFailedError("Order recorded but notification failed", order) from e

        order.mark_confirmed()
        logger.info(f"Order {order.pk} confirmed; buyer and seller notified")
        return order

    @staticmethod
    def find_product(product_id: str) -> Optional[Product]:
        if not (product_id.isascii() and product_id.isdigit()) or len(product_id) > MAX_PRODUCT_ID_DIGITS:
            return None
        return Product.objects.filter(pk=int(product_id)).first()

    def notify_buyer(self, order: Order):
        body = (
            f"Hi {order.name},\n\n"
            f'Your order for "{order.item_name}" has been placed.\n\n'
            f"We will deliver to:\n{order.address}\n\n"
            "Thanks for shopping!"
        )
        return self.notification_service.send_email(
            recipient=order.email,
            subject="Order Confirmation",
            body=body,
            category=EmailNotification.Category.ORDER_CONFIRMATION,
            reference=f"order:{order.pk}",
        )

    def notify_seller(self, order: Order, product: Product):
        body = (
            f"Hi {product.admin_name},\n\n"
            f'Your product "{order.item_name}" has been ordered by:\n\n'
            f"Name: {order.name}\n"
            f"Email: {order.email}\n"
            f"Phone: {order.phone}\n"
            f"Address: {order.address}\n\n"
            "Please fulfill the order."
        )
        return self.notification_service.send_email(
            recipient=product.admin_email,
            subject="New Order Received",
            body=body,
            category=EmailNotification.Category.ORDER_FULFILLMENT,
            reference=f"order:{order.pk}",
        )


def search_orders(query: str):
    """
    Orders of every registered user whose email or name contains ``query``
    (case-insensitive), newest first.
    """
    emails = (
        User.objects.filter(Q(username__icontains=query) | Q(user_profile__name__icontains=query))
        .values_list("username", flat=True)
        .distinct()
    )
    return Order.objects.for_emails(emails).newest_first()
