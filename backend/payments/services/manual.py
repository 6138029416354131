from decimal import Decimal
from urllib.parse import quote

QR_CODE_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/"


def build_payment_qr_url(wallet_address: str, amount: Decimal, *, size: int = 200) -> str:
    """QR code for a manual transfer to the host wallet."""
    data = quote(f"ethereum:{wallet_address}?amount={amount}", safe="")
    return f"{QR_CODE_ENDPOINT}?size={size}x{size}&data={data}"
