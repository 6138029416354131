from decimal import Decimal

import pytest

from bookings.services import checkout
from experiences.models import Review


@pytest.fixture
def booking(experience, traveller, start_date):
    return checkout.create_booking(
        experience_id=experience.pk,
        user=traveller,
        start_date=start_date,
        guests=1,
    )


@pytest.mark.django_db
def test_review_requires_confirmed_booking(traveller_client, experience, booking):
    response = traveller_client.post(
        f"/api/experiences/{experience.pk}/reviews/",
        {"booking_id": str(booking.pk), "rating": 5, "comment": "Lovely"},
        format="json",
    )

    assert response.status_code == 400
    assert "booking_id" in response.json()


@pytest.mark.django_db
def test_review_updates_experience_rating(traveller_client, experience, booking):
    checkout.confirm_payment(booking_id=booking.pk, transaction_hash="0xabc")

    response = traveller_client.post(
        f"/api/experiences/{experience.pk}/reviews/",
        {"booking_id": str(booking.pk), "rating": 4, "comment": "Great sunset"},
        format="json",
    )

    assert response.status_code == 201
    assert response.json()["user_name"] == "Tess"
    experience.refresh_from_db()
    assert experience.review_count == 1
    assert experience.rating == Decimal("4.00")


@pytest.mark.django_db
def test_one_review_per_booking(traveller_client, experience, booking):
    checkout.confirm_payment(booking_id=booking.pk, transaction_hash="0xabc")
    url = f"/api/experiences/{experience.pk}/reviews/"
    payload = {"booking_id": str(booking.pk), "rating": 5}

    assert traveller_client.post(url, payload, format="json").status_code == 201
    assert traveller_client.post(url, payload, format="json").status_code == 400
    assert Review.objects.count() == 1


@pytest.mark.django_db
def test_cannot_review_someone_elses_booking(host_client, experience, booking):
    checkout.confirm_payment(booking_id=booking.pk, transaction_hash="0xabc")

    response = host_client.post(
        f"/api/experiences/{experience.pk}/reviews/",
        {"booking_id": str(booking.pk), "rating": 1},
        format="json",
    )

    assert response.status_code == 400


@pytest.mark.django_db
def test_reviews_are_public(client, experience, booking, traveller):
    Review.objects.create(experience=experience, booking=booking, user=traveller, rating=3)

    response = client.get(f"/api/experiences/{experience.pk}/reviews/")

    assert response.status_code == 200
    assert [item["rating"] for item in response.json()] == [3]
    experience.refresh_from_db()
    assert experience.review_count == 1
