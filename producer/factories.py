import factory
from django.contrib.gis.geos import Point
from factory.django import DjangoModelFactory

from .models import Product


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    class Params:
        latitude = 18.52
        longitude = 73.85

    name = factory.Faker("word")
    cost = factory.Faker("pydecimal", left_digits=3, right_digits=2, positive=True)
    store = factory.Faker("company")
    stock = factory.Faker("numerify", text="## units")
    image = factory.django.ImageField(color="green", width=10, height=10)
    category = "Vegetables"
    admin_email = factory.Faker("email")
    admin_name = factory.Faker("name")
    city = "Pune"
    unit = "kg"
    location = factory.LazyAttribute(lambda obj: Point(obj.longitude, obj.latitude, srid=4326))
