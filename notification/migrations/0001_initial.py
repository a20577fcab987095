import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="EmailNotification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("recipient", models.CharField(blank=True, db_index=True, max_length=254, verbose_name="Recipient")),
                ("subject", models.CharField(max_length=255, verbose_name="Subject")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("order_confirmation", "Order Confirmation"),
                            ("order_fulfillment", "Order Fulfillment Request"),
                            ("admin_otp", "Admin OTP"),
                        ],
                        max_length=30,
                        verbose_name="Category",
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Object the email is about, e.g. 'order:42'",
                        max_length=100,
                        verbose_name="Reference",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("sent", "Sent"), ("failed", "Failed")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("error_message", models.TextField(blank=True)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Email Notification",
                "verbose_name_plural": "Email Notifications",
                "db_table": "email_notifications",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["category", "status"], name="email_notif_cat_status_idx")],
            },
        ),
    ]
