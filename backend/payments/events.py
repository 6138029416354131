"""
Typed views of the payloads vendors send back to us.

Wallet widgets report ``success``, ``error`` or ``exit``; Coinbase Commerce
posts webhook events. Both are untrusted input, so they are parsed into small
frozen dataclasses here and rejected with ``ValidationError`` when malformed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from bookings.exceptions import ValidationError

MAX_HASH_LENGTH = 200
MAX_MESSAGE_LENGTH = 500


@dataclass(frozen=True)
class WalletSuccess:
    transaction_hash: str
    payer_address: str | None = None
    type: str = "success"


@dataclass(frozen=True)
class WalletError:
    message: str
    type: str = "error"


@dataclass(frozen=True)
class WalletExit:
    type: str = "exit"


WalletEvent = Union[WalletSuccess, WalletError, WalletExit]


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string.", field=key)
    return value.strip() or None


def parse_wallet_event(data: Any) -> WalletEvent:
    if not isinstance(data, Mapping):
        raise ValidationError("Event payload must be an object.")

    event_type = data.get("type")
    if event_type == "success":
        transaction_hash = _optional_str(data, "transaction_hash")
        if not transaction_hash:
            raise ValidationError("A success event needs a transaction_hash.", field="transaction_hash")
        if len(transaction_hash) > MAX_HASH_LENGTH:
            raise ValidationError("transaction_hash is too long.", field="transaction_hash")
        return WalletSuccess(
            transaction_hash=transaction_hash,
            payer_address=_optional_str(data, "payer_address"),
        )
    if event_type == "error":
        message = _optional_str(data, "message") or "The wallet reported an error."
        return WalletError(message=message[:MAX_MESSAGE_LENGTH])
    if event_type == "exit":
        return WalletExit()
    raise ValidationError(f"Unknown wallet event type: {event_type!r}.", field="type")


CHARGE_CONFIRMED = "charge:confirmed"
CHARGE_RESOLVED = "charge:resolved"
CHARGE_FAILED = "charge:failed"
CONFIRMING_EVENTS = frozenset({CHARGE_CONFIRMED, CHARGE_RESOLVED})


@dataclass(frozen=True)
class CommerceEvent:
    id: str
    type: str
    charge_code: str
    payment_id: str | None = None

    @property
    def confirms_payment(self) -> bool:
        return self.type in CONFIRMING_EVENTS

    @property
    def fails_payment(self) -> bool:
        return self.type == CHARGE_FAILED


def parse_commerce_event(payload: Any) -> CommerceEvent:
    """Parse a Commerce webhook body: ``{"event": {"id", "type", "data": {"code", "metadata"}}}``."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Webhook payload must be an object.")
    event = payload.get("event")
    if not isinstance(event, Mapping):
        raise ValidationError("Webhook payload has no event.")
    event_type = event.get("type")
    data = event.get("data")
    if not isinstance(event_type, str) or not isinstance(data, Mapping):
        raise ValidationError("Webhook event is missing its type or data.")
    code = data.get("code")
    if not isinstance(code, str) or not code:
        raise ValidationError("Webhook event has no charge code.")
    metadata = data.get("metadata")
    payment_id = metadata.get("paymentId") if isinstance(metadata, Mapping) else None
    return CommerceEvent(
        id=str(event.get("id", "")),
        type=event_type,
        charge_code=code,
        payment_id=payment_id if isinstance(payment_id, str) and payment_id else None,
    )
