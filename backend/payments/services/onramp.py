import json
from decimal import Decimal
from urllib.parse import urlencode

from django.conf import settings

DEFAULT_NETWORK = "base"


class OnrampError(Exception):
    pass


def build_onramp_url(
    *,
    destination_address: str,
    amount: Decimal,
    currency: str,
    redirect_url: str | None = None,
    partner_user_id: str | None = None,
    network: str = DEFAULT_NETWORK,
) -> str:
    """Build the hosted onramp link that funds ``destination_address`` with the booking amount."""

    app_id = getattr(settings, "COINBASE_ONRAMP_APP_ID", "")
    if not app_id:
        raise OnrampError("COINBASE_ONRAMP_APP_ID is not configured.")
    if not destination_address:
        raise OnrampError("A destination wallet address is required.")

    asset = currency.upper()
    params = {
        "appId": app_id,
        "addresses": json.dumps({destination_address: [network]}, separators=(",", ":")),
        "assets": json.dumps([asset], separators=(",", ":")),
        "defaultAsset": asset,
        "presetCryptoAmount": str(amount),
    }
    if redirect_url:
        params["redirectUrl"] = redirect_url
    if partner_user_id:
        params["partnerUserId"] = partner_user_id
    return f"{settings.COINBASE_ONRAMP_URL}?{urlencode(params)}"
