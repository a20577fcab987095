from decimal import Decimal

import django.contrib.gis.db.models.fields
import django.core.validators
from django.db import migrations, models

import producer.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                (
                    "cost",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="Cost",
                    ),
                ),
                ("store", models.CharField(blank=True, max_length=255, verbose_name="Store")),
                ("stock", models.CharField(blank=True, max_length=100, verbose_name="Stock")),
                ("image", models.ImageField(upload_to="products/%Y/%m/", verbose_name="Image")),
                ("category", models.CharField(blank=True, db_index=True, max_length=100, verbose_name="Category")),
                ("admin_email", models.EmailField(max_length=254, verbose_name="Admin Email")),
                ("admin_name", models.CharField(max_length=255, verbose_name="Admin Name")),
                ("city", models.CharField(db_index=True, max_length=100, verbose_name="City")),
                ("unit", models.CharField(blank=True, max_length=50, verbose_name="Unit")),
                (
                    "location",
                    django.contrib.gis.db.models.fields.PointField(
                        default=producer.models.default_location,
                        geography=True,
                        help_text="Product location (longitude, latitude)",
                        srid=4326,
                        verbose_name="Location",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Product",
                "verbose_name_plural": "Products",
                "ordering": ["id"],
            },
        ),
    ]
