from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _


class OrderStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    CONFIRMED = "confirmed", _("Confirmed")
    PRODUCT_MISSING = "product_missing", _("Product Missing")
    NOTIFICATION_FAILED = "notification_failed", _("Notification Failed")

    @classmethod
    def get_next_allowed_statuses(cls, current_status):
        """Returns a list of statuses that can be transitioned to from the current status."""
        status_flow = {
            cls.PENDING: [cls.CONFIRMED, cls.PRODUCT_MISSING, cls.NOTIFICATION_FAILED],
            cls.CONFIRMED: [],
            cls.PRODUCT_MISSING: [],
            cls.NOTIFICATION_FAILED: [],
        }
        return status_flow.get(current_status, [])


class OrderQuerySet(models.QuerySet):
    """Custom QuerySet for Order with common queries."""

    def for_email(self, email):
        return self.filter(email=email)

    def for_emails(self, emails):
        return self.filter(email__in=list(emails))

    def newest_first(self):
        return self.order_by("-created_at", "-id")


class Order(models.Model):
    """
    An order placed by a buyer.

    Fields:
    - name, phone, email, address: buyer contact and delivery details.
    - product_id, item_name, item_price: snapshot of the ordered product at
      order time. Not a foreign key, so the order outlives the product.
    - status: where the placement workflow stopped.
    - failure_reason: why the workflow stopped short of ``confirmed``.
    """

    name = models.CharField(max_length=255, verbose_name=_("Buyer Name"))
    phone = models.CharField(max_length=30, verbose_name=_("Phone"))
    email = models.EmailField(db_index=True, verbose_name=_("Buyer Email"))
    address = models.TextField(verbose_name=_("Delivery Address"))

    product_id = models.CharField(max_length=64, db_index=True, verbose_name=_("Product ID"))
    item_name = models.CharField(max_length=255, blank=True, verbose_name=_("Item Name"))
    item_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_("Price At Order"),
    )

    status = models.CharField(
        max_length=30,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )
    failure_reason = models.TextField(blank=True, verbose_name=_("Failure Reason"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Order #{self.pk} {self.item_name or self.product_id} for {self.email}"

    @property
    def item(self):
        """Tagged snapshot of the ordered product."""
        return {
            "productId": self.product_id,
            "name": self.item_name,
            "priceAtOrder": self.item_price,
        }

    def transition_to(self, new_status, reason=""):
        if new_status not in OrderStatus.get_next_allowed_statuses(self.status):
            raise ValidationError(f"Cannot move order {self.pk} from {self.status} to {new_status}.")
        self.status = new_status
        self.failure_reason = reason
        self.save(update_fields=["status", "failure_reason", "item_name", "item_price", "updated_at"])

    def mark_confirmed(self):
        self.transition_to(OrderStatus.CONFIRMED)

    def mark_product_missing(self):
        self.transition_to(OrderStatus.PRODUCT_MISSING, f"Product {self.product_id} not found")

    def mark_notification_failed(self, reason):
        self.transition_to(OrderStatus.NOTIFICATION_FAILED, reason)
