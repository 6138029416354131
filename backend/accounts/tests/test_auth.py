import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

User = get_user_model()

WALLET = "0x" + "ab" * 20


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        username="traveller@example.com",
        email="traveller@example.com",
        password="examplepass",
        first_name="Tess",
        last_name="Traveller",
    )


def test_register_creates_user_and_returns_tokens(db, client):
    payload = {
        "email": "New@Example.com",
        "password": "password123",
        "first_name": "New",
        "last_name": "User",
        "wallet_address": WALLET,
    }
    response = client.post("/api/auth/register/", payload, format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["wallet_address"] == WALLET
    assert body["user"]["display_name"] == "New User"
    assert "access" in body and "refresh" in body


def test_register_with_existing_email_is_rejected(db, client, user):
    payload = {
        "email": "traveller@example.com",
        "password": "password123",
    }
    response = client.post("/api/auth/register/", payload, format="json")

    assert response.status_code == 400
    assert "email" in response.json()


def test_register_rejects_malformed_wallet(db, client):
    payload = {
        "email": "wallet@example.com",
        "password": "password123",
        "wallet_address": "not-a-wallet",
    }
    response = client.post("/api/auth/register/", payload, format="json")

    assert response.status_code == 400
    assert "wallet_address" in response.json()


def test_login_returns_tokens_and_user_payload(db, client, user):
    response = client.post(
        "/api/auth/login/",
        {"email": "traveller@example.com", "password": "examplepass"},
        format="json",
    )

    assert response.status_code == 200
    data = response.json()
    assert set(data.keys()) == {"access", "refresh", "user"}
    assert data["user"]["email"] == "traveller@example.com"


def test_refresh_issues_new_access_token(db, client, user):
    login_response = client.post(
        "/api/auth/login/",
        {"email": "traveller@example.com", "password": "examplepass"},
        format="json",
    )

    refresh_token = login_response.json()["refresh"]
    refresh_response = client.post(
        "/api/auth/refresh/", {"refresh": refresh_token}, format="json"
    )

    assert refresh_response.status_code == 200
    assert "access" in refresh_response.json()


def test_me_endpoint_requires_authentication(db, client):
    response = client.get("/api/auth/me/")
    assert response.status_code == 401


def test_me_patch_sets_wallet_address(db, client, user):
    client.force_authenticate(user=user)

    response = client.patch("/api/auth/me/", {"wallet_address": WALLET}, format="json")

    assert response.status_code == 200
    user.refresh_from_db()
    assert user.wallet_address == WALLET


def test_me_patch_updates_email_and_username(db, client, user):
    client.force_authenticate(user=user)

    response = client.patch(
        "/api/auth/me/",
        {"email": "Updated@Example.com", "display_name": "Tess T."},
        format="json",
    )

    assert response.status_code == 200
    assert response.json()["display_name"] == "Tess T."
    user.refresh_from_db()
    assert user.email == "updated@example.com"
    assert user.username == "updated@example.com"


def test_me_patch_rejects_email_of_another_user(db, client, user):
    User.objects.create_user(username="other@example.com", email="other@example.com", password="examplepass")
    client.force_authenticate(user=user)

    response = client.patch("/api/auth/me/", {"email": "Other@Example.com"}, format="json")

    assert response.status_code == 400
    assert "email" in response.json()
    user.refresh_from_db()
    assert user.username == "traveller@example.com"


def test_me_patch_blank_wallet_clears_address_and_keeps_display_name(db, client, user):
    user.wallet_address = WALLET
    user.save(update_fields=["wallet_address"])
    client.force_authenticate(user=user)

    response = client.patch("/api/auth/me/", {"wallet_address": "", "display_name": ""}, format="json")

    assert response.status_code == 200
    user.refresh_from_db()
    assert user.wallet_address == ""
    assert user.display_name == "Tess Traveller"
