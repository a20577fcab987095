from decimal import Decimal

from django.contrib.gis.db import models
from django.contrib.gis.geos import Point
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _


def default_location():
    return Point(0.0, 0.0, srid=4326)


class Product(models.Model):
    """
    A product listed by a marketplace admin.

    Fields:
    - name, cost, store, stock, category, unit: listing details.
    - image: uploaded picture; its storage URL is exposed as ``imageRef``.
    - admin_email, admin_name: denormalized copy of the listing admin, used to
      address fulfillment requests. Not a foreign key.
    - city: exact-match discovery key.
    - location: WGS 84 point with a spatial index. GEOS points are (x, y), so
      the coordinates are (longitude, latitude).
    """

    name = models.CharField(max_length=255, verbose_name=_("Name"))
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name=_("Cost"),
    )
    store = models.CharField(max_length=255, blank=True, verbose_name=_("Store"))
    stock = models.CharField(max_length=100, blank=True, verbose_name=_("Stock"))
    image = models.ImageField(upload_to="products/%Y/%m/", verbose_name=_("Image"))
    category = models.CharField(max_length=100, blank=True, db_index=True, verbose_name=_("Category"))
    admin_email = models.EmailField(verbose_name=_("Admin Email"))
    admin_name = models.CharField(max_length=255, verbose_name=_("Admin Name"))
    city = models.CharField(max_length=100, db_index=True, verbose_name=_("City"))
    unit = models.CharField(max_length=50, blank=True, verbose_name=_("Unit"))
    location = models.PointField(
        srid=4326,
        geography=True,
        spatial_index=True,
        default=default_location,
        help_text=_("Product location (longitude, latitude)"),
        verbose_name=_("Location"),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.city})"

    @property
    def longitude(self):
        return self.location.x

    @property
    def latitude(self):
        return self.location.y

    @property
    def geojson_location(self):
        """GeoJSON point; coordinates are [longitude, latitude]."""
        return {"type": "Point", "coordinates": [self.location.x, self.location.y]}
