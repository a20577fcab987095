import factory
from factory.django import DjangoModelFactory

from .models import Order, OrderStatus


class OrderFactory(DjangoModelFactory):
    class Meta:
        model = Order

    name = factory.Faker("name")
    phone = factory.Faker("numerify", text="98########")
    email = factory.Faker("email")
    address = factory.Faker("address")
    product_id = factory.Sequence(lambda n: str(n + 1))
    item_name = factory.Faker("word")
    item_price = factory.Faker("pydecimal", left_digits=3, right_digits=2, positive=True)
    status = OrderStatus.CONFIRMED
