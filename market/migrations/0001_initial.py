from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Buyer Name")),
                ("phone", models.CharField(max_length=30, verbose_name="Phone")),
                ("email", models.EmailField(db_index=True, max_length=254, verbose_name="Buyer Email")),
                ("address", models.TextField(verbose_name="Delivery Address")),
                ("product_id", models.CharField(db_index=True, max_length=64, verbose_name="Product ID")),
                ("item_name", models.CharField(blank=True, max_length=255, verbose_name="Item Name")),
                (
                    "item_price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="Price At Order"
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("product_missing", "Product Missing"),
                            ("notification_failed", "Notification Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=30,
                        verbose_name="Status",
                    ),
                ),
                ("failure_reason", models.TextField(blank=True, verbose_name="Failure Reason")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
