from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from experiences.models import Experience

HOST_WALLET = "0x" + "11" * 20
TRAVELLER_WALLET = "0x" + "22" * 20


@pytest.fixture
def host(db):
    return User.objects.create_user(
        username="host@example.com",
        email="host@example.com",
        password="examplepass",
        first_name="Alexandra",
        display_name="Alexandra",
        wallet_address=HOST_WALLET,
    )


@pytest.fixture
def traveller(db):
    return User.objects.create_user(
        username="traveller@example.com",
        email="traveller@example.com",
        password="examplepass",
        first_name="Tess",
        display_name="Tess",
        wallet_address=TRAVELLER_WALLET,
    )


@pytest.fixture
def experience(host):
    return Experience.objects.create(
        host=host,
        title="Sunset Sail",
        description="A sail around the caldera.",
        category="Water Activities",
        location="Santorini, Greece",
        duration="5 hours",
        price=Decimal("100.00"),
        currency="USDC",
        amenities=["Private boat"],
        images=["https://images.test/sail.jpg"],
    )


@pytest.fixture
def start_date():
    return (timezone.now() + timedelta(days=7)).replace(microsecond=0)


@pytest.fixture
def traveller_client(traveller):
    client = APIClient()
    client.force_authenticate(traveller)
    return client


@pytest.fixture
def host_client(host):
    client = APIClient()
    client.force_authenticate(host)
    return client
