from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

import requests
from django.conf import settings
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


class WalletServiceError(Exception):
    """Base error for the wallet gateway."""


class WalletTimeout(WalletServiceError):
    pass


class WalletUnavailable(WalletServiceError):
    pass


class WalletRejected(WalletServiceError):
    pass


class InsufficientFunds(WalletRejected):
    pass


RETRYABLE_ERRORS = (WalletTimeout, WalletUnavailable)


@dataclass
class TransferResult:
    transaction_hash: str
    status: str
    amount: Decimal
    currency: str


def generate_transaction_hash() -> str:
    return f"0x{secrets.token_hex(32)}"


def _should_use_stub() -> bool:
    if getattr(settings, "WALLET_USE_STUB", False):
        return True
    return not getattr(settings, "WALLET_API_URL", "")


def _headers() -> dict:
    headers = {"Accept": "application/json"}
    api_key = getattr(settings, "WALLET_API_KEY", "")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _request(method: str, path: str, **kwargs) -> Mapping[str, Any]:
    url = f"{settings.WALLET_API_URL.rstrip('/')}{path}"
    try:
        response = requests.request(
            method,
            url,
            headers=_headers(),
            timeout=settings.WALLET_TIMEOUT_SECONDS,
            **kwargs,
        )
    except requests.Timeout as exc:
        raise WalletTimeout(f"Wallet service timed out ({method} {path}).") from exc
    except requests.RequestException as exc:
        raise WalletUnavailable(f"Wallet service unreachable: {exc}") from exc

    if response.status_code >= 500:
        raise WalletUnavailable(f"Wallet service error {response.status_code}.")

    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, Mapping):
        payload = {}

    if response.status_code >= 400:
        detail = payload.get("error") or payload.get("detail") or f"HTTP {response.status_code}"
        if response.status_code == 402 or payload.get("code") == "insufficient_funds":
            raise InsufficientFunds(detail)
        raise WalletRejected(detail)
    return payload


def get_balance(address: str, currency: str) -> Decimal:
    """
    Return the balance of ``currency`` held by ``address``.

    Balance reads are idempotent, so timeouts and 5xx responses are retried with
    exponential backoff before giving up.
    """

    if _should_use_stub():
        return Decimal(str(settings.WALLET_STUB_BALANCE))

    retrying = Retrying(
        stop=stop_after_attempt(max(1, settings.WALLET_BALANCE_RETRY_ATTEMPTS)),
        wait=wait_exponential(multiplier=settings.WALLET_RETRY_BACKOFF_SECONDS, max=10),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            payload = _request("GET", f"/wallets/{address}/balances/{currency.upper()}")

    try:
        return Decimal(str(payload["balance"]))
    except (KeyError, TypeError, InvalidOperation) as exc:
        raise WalletUnavailable("Wallet service returned an unreadable balance.") from exc


def transfer(*, from_address: str, to_address: str, amount: Decimal, currency: str) -> TransferResult:
    """
    Send ``amount`` of ``currency`` from the payer to the host wallet.

    Transfers move money, so this is called exactly once per attempt and never
    retried here; callers record a failure and let the user retry explicitly.
    """

    if _should_use_stub():
        transaction_hash = generate_transaction_hash()
        logger.info(
            "Stub transfer of %s %s from %s to %s: %s",
            amount,
            currency,
            from_address,
            to_address,
            transaction_hash,
        )
        return TransferResult(
            transaction_hash=transaction_hash,
            status="success",
            amount=amount,
            currency=currency,
        )

    payload = _request(
        "POST",
        "/transfers",
        json={
            "from": from_address,
            "to": to_address,
            "amount": str(amount),
            "currency": currency.upper(),
        },
    )
    status = payload.get("status", "")
    transaction_hash = payload.get("transaction_hash") or ""
    if status not in {"success", "submitted", "confirmed"} or not transaction_hash:
        raise WalletRejected(payload.get("error") or f"Transfer was not accepted (status={status or 'unknown'}).")
    return TransferResult(
        transaction_hash=transaction_hash,
        status=status,
        amount=amount,
        currency=currency,
    )
