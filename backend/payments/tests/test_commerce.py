from types import SimpleNamespace

import pytest
import requests

from bookings.services import checkout
from payments.services import commerce


@pytest.fixture
def booking(experience, traveller, start_date):
    return checkout.create_booking(
        experience_id=experience.pk,
        user=traveller,
        start_date=start_date,
        guests=2,
    )


@pytest.mark.django_db
def test_stub_charge_returns_preview_url(settings, booking):
    settings.COINBASE_USE_STUB = True
    settings.FRONTEND_URL = "https://app.test"

    charge = commerce.create_charge(
        booking=booking,
        payment=booking.latest_payment,
        redirect_url="https://app.test/done",
        cancel_url="https://app.test/cancel",
    )

    assert len(charge.code) == 8
    assert charge.hosted_url.startswith("https://app.test/payments/preview?")
    # preview link should include booking id for reference
    assert f"booking={booking.pk}" in charge.hosted_url


@pytest.mark.django_db
def test_charge_uses_commerce_api_when_configured(monkeypatch, settings, booking):
    settings.COINBASE_USE_STUB = False
    settings.COINBASE_COMMERCE_API_KEY = "cc_test_123"
    settings.COINBASE_COMMERCE_API_URL = "https://api.commerce.test"

    captured = {}

    def fake_post(url, json, headers, timeout):
        captured.update(url=url, json=json, headers=headers)
        return SimpleNamespace(
            ok=True,
            status_code=201,
            text="",
            json=lambda: {
                "data": {
                    "id": "charge-id",
                    "code": "ABCD1234",
                    "hosted_url": "https://commerce.test/charges/ABCD1234",
                }
            },
        )

    monkeypatch.setattr("payments.services.commerce.requests.post", fake_post)

    payment = booking.latest_payment
    charge = commerce.create_charge(
        booking=booking,
        payment=payment,
        redirect_url="https://app.test/done",
        cancel_url="https://app.test/cancel",
    )

    assert charge.code == "ABCD1234"
    assert captured["url"] == "https://api.commerce.test/charges"
    assert captured["headers"]["X-CC-Api-Key"] == "cc_test_123"
    assert captured["headers"]["X-CC-Version"] == "2018-03-22"
    body = captured["json"]
    assert body["pricing_type"] == "fixed_price"
    assert body["local_price"] == {"amount": "200.00", "currency": "USDC"}
    assert body["metadata"]["bookingId"] == str(booking.pk)
    assert body["redirect_url"] == "https://app.test/done"


@pytest.mark.django_db
def test_charge_errors_raise_commerce_error(monkeypatch, settings, booking):
    settings.COINBASE_USE_STUB = False
    settings.COINBASE_COMMERCE_API_KEY = "cc_test_123"

    def fake_post(url, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr("payments.services.commerce.requests.post", fake_post)

    with pytest.raises(commerce.CommerceError):
        commerce.create_charge(
            booking=booking,
            payment=booking.latest_payment,
            redirect_url="https://app.test/done",
            cancel_url="https://app.test/cancel",
        )


def test_signature_verification():
    payload = b'{"event": {"type": "charge:confirmed"}}'
    signature = commerce.compute_signature(payload, "whsec_test")

    assert commerce.verify_webhook_signature(payload, signature, "whsec_test")
    assert not commerce.verify_webhook_signature(payload, signature, "other-secret")
    assert not commerce.verify_webhook_signature(payload + b" ", signature, "whsec_test")
    assert not commerce.verify_webhook_signature(payload, None, "whsec_test")
