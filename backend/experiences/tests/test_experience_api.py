import pytest
from rest_framework.test import APIClient

from accounts.models import User
from experiences.models import Experience


def _payload(**overrides):
    payload = {
        "title": "Kyoto Tea Ceremony",
        "description": "A traditional tea ceremony.",
        "category": "Cultural",
        "location": "Kyoto, Japan",
        "duration": "3 hours",
        "price": "120.00",
        "amenities": ["Tea ceremony"],
        "images": ["https://images.test/tea.jpg"],
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
def test_catalogue_is_public(experience):
    response = APIClient().get("/api/experiences/")

    assert response.status_code == 200
    body = response.json()
    assert [item["title"] for item in body] == ["Sunset Sail"]
    assert body[0]["host"]["name"] == "Alexandra"
    assert body[0]["price"] == "100.00"


@pytest.mark.django_db
def test_catalogue_filters_by_category_and_search(experience, host):
    Experience.objects.create(
        host=host,
        title="Desert Stargazing",
        description="Telescopes under the Sahara sky.",
        category="Night Activities",
        location="Marrakech, Morocco",
        duration="7 hours",
        price="85.00",
        amenities=["Telescopes"],
        images=["https://images.test/stars.jpg"],
        featured=True,
    )
    client = APIClient()

    by_category = client.get("/api/experiences/", {"category": "Night Activities"}).json()
    assert [item["title"] for item in by_category] == ["Desert Stargazing"]

    by_search = client.get("/api/experiences/", {"search": "santorini"}).json()
    assert [item["title"] for item in by_search] == ["Sunset Sail"]

    featured = client.get("/api/experiences/", {"featured": "true"}).json()
    assert [item["title"] for item in featured] == ["Desert Stargazing"]

    cheapest_first = client.get("/api/experiences/", {"ordering": "price"}).json()
    assert [item["title"] for item in cheapest_first] == ["Desert Stargazing", "Sunset Sail"]


@pytest.mark.django_db
def test_create_experience_sets_host(host_client, host):
    response = host_client.post("/api/experiences/", _payload(), format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["currency"] == "USDC"
    experience = Experience.objects.get(pk=body["id"])
    assert experience.host == host


@pytest.mark.django_db
def test_create_experience_requires_authentication():
    response = APIClient().post("/api/experiences/", _payload(), format="json")
    assert response.status_code == 401


@pytest.mark.django_db
@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"amenities": []}, "amenities"),
        ({"images": []}, "images"),
        ({"images": [""]}, "images"),
        ({"price": "0"}, "price"),
        ({"currency": "DOGE"}, "currency"),
    ],
)
def test_create_experience_validation(host_client, overrides, field):
    response = host_client.post("/api/experiences/", _payload(**overrides), format="json")

    assert response.status_code == 400
    assert field in response.json()


@pytest.mark.django_db
def test_only_host_can_edit(experience, host_client, traveller_client):
    denied = traveller_client.patch(f"/api/experiences/{experience.pk}/", {"title": "Mine now"}, format="json")
    assert denied.status_code == 403

    allowed = host_client.patch(f"/api/experiences/{experience.pk}/", {"title": "Golden Hour Sail"}, format="json")
    assert allowed.status_code == 200
    assert allowed.json()["title"] == "Golden Hour Sail"


@pytest.mark.django_db
def test_mine_lists_callers_experiences(experience, host_client, traveller_client):
    assert [item["id"] for item in host_client.get("/api/experiences/mine/").json()] == [str(experience.pk)]
    assert traveller_client.get("/api/experiences/mine/").json() == []


@pytest.mark.django_db
def test_host_flag_follows_experiences(host, traveller, experience):
    assert host.is_host
    assert not traveller.is_host


@pytest.mark.django_db
def test_experience_with_bookings_cannot_be_deleted(experience, host_client, traveller, start_date):
    from bookings.services.checkout import create_booking

    create_booking(experience_id=experience.pk, user=traveller, start_date=start_date, guests=1)

    response = host_client.delete(f"/api/experiences/{experience.pk}/")

    assert response.status_code == 403
    assert Experience.objects.filter(pk=experience.pk).exists()


@pytest.mark.django_db
def test_host_can_delete_unbooked_experience(host_client, host):
    experience = Experience.objects.create(
        host=host,
        title="Draft",
        description="Draft listing",
        category="Cultural",
        location="Nowhere",
        duration="1 hour",
        price="10.00",
        amenities=["Guide"],
        images=["https://images.test/draft.jpg"],
    )

    assert host_client.delete(f"/api/experiences/{experience.pk}/").status_code == 204
    assert not User.objects.get(pk=host.pk).experiences.exists()
