from datetime import timedelta

import factory
from django.contrib.auth.models import User
from django.utils import timezone
from factory.django import DjangoModelFactory

from .models import AdminOTP, UserProfile


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User
        django_get_or_create = ("username",)

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.LazyAttribute(lambda obj: obj.email)
    password = factory.PostGenerationMethodCall("set_password", "testpass123")
    profile = factory.RelatedFactory("user.factories.UserProfileFactory", factory_related_name="user")


class UserProfileFactory(DjangoModelFactory):
    class Meta:
        model = UserProfile

    user = factory.SubFactory(UserFactory, profile=None)
    name = factory.Faker("name")
    city = factory.Faker("city")
    role = UserProfile.Role.USER


class AdminOTPFactory(DjangoModelFactory):
    class Meta:
        model = AdminOTP

    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    otp = factory.LazyFunction(AdminOTP.generate_code)
    expires_at = factory.LazyFunction(lambda: timezone.now() + timedelta(minutes=10))
