from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import Client as HttpClient
from django.utils import timezone

from accounts.models import Profile
from bids.models import Bid
from catalog.models import Service, ServiceCategory
from service_requests.models import RequestItem, ServiceRequest

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def no_ratelimit(settings):
    settings.RATELIMIT_ENABLE = False
    cache.clear()


@pytest.fixture
def make_profile(db):
    def factory(email, role, full_name=None, phone=None):
        user = User.objects.create_user(username=email, email=email, password=PASSWORD)
        return Profile.objects.create(
            user=user,
            email=email,
            full_name=full_name or email.split("@")[0].title(),
            phone=phone,
            role=role,
        )
    return factory


@pytest.fixture
def client_profile(make_profile):
    return make_profile("host@example.com", Profile.ROLE_CLIENT, "Hana Host")


@pytest.fixture
def vendor_profile(make_profile):
    return make_profile("chef@example.com", Profile.ROLE_VENDOR, "Chef Catering Co")


@pytest.fixture
def login():
    def factory(profile):
        http = HttpClient()
        http.force_login(profile.user)
        return http
    return factory


@pytest.fixture
def category(db):
    def factory(name):
        obj, _ = ServiceCategory.objects.get_or_create(name=name)
        return obj
    return factory


@pytest.fixture
def make_service(db):
    def factory(vendor, category, price="1000", is_available=True, title=None):
        return Service.objects.create(
            vendor=vendor,
            category=category,
            title=title or f"{category.name} by {vendor.full_name}",
            description=f"{category.name} service",
            price=Decimal(price),
            is_available=is_available,
        )
    return factory


@pytest.fixture
def make_request(db):
    def factory(client, categories, days_ahead=30, budget_min=None, budget_max=None, status=ServiceRequest.STATUS_OPEN):
        service_request = ServiceRequest.objects.create(
            client=client,
            event_date=timezone.localdate() + timedelta(days=days_ahead),
            event_location="Cape Town",
            budget_min=budget_min,
            budget_max=budget_max,
            status=status,
        )
        for cat in categories:
            RequestItem.objects.create(request=service_request, category=cat)
        return service_request
    return factory


@pytest.fixture
def make_bid(db):
    def factory(service_request, service, amount, status=Bid.STATUS_PENDING):
        return Bid.objects.create(
            request=service_request,
            vendor=service.vendor,
            service=service,
            amount=Decimal(amount),
            message="We would love to work your event",
            status=status,
        )
    return factory
