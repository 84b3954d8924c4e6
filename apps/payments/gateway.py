"""
PayWay gateway adapter

Pure helpers for the hosted purchase page: building the signed purchase
form and verifying callback signatures. Both use base64-encoded
HMAC-SHA512 keyed with the merchant's public key.
"""

import base64
import hashlib
import hmac
import time
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import IntEnum
from typing import Mapping, Optional

# Concatenation order the gateway uses for the purchase hash
PURCHASE_HASH_FIELDS = (
    "req_time",
    "merchant_id",
    "tran_id",
    "amount",
    "firstname",
    "lastname",
    "email",
    "phone",
    "type",
    "payment_option",
    "return_url",
    "cancel_url",
    "continue_success_url",
    "return_params",
    "lifetime",
    "skip_success_page",
)

# Fields covered by the callback hash; the received hash itself is not part of it
CALLBACK_HASH_FIELDS = ("tran_id", "req_time", "status")

REQ_TIME_FORMAT = "%Y%m%d%H%M%S"


class CallbackStatus(IntEnum):
    SUCCESS = 0
    PENDING = 1
    FAILED = 2
    CANCELLED = 3


STATUS_TEXT = {
    CallbackStatus.SUCCESS: "Payment successful",
    CallbackStatus.PENDING: "Payment processing",
    CallbackStatus.FAILED: "Payment failed",
    CallbackStatus.CANCELLED: "Payment cancelled",
}


def status_text(code) -> str:
    try:
        return STATUS_TEXT[CallbackStatus(int(code))]
    except (TypeError, ValueError):
        return f"Unknown status: {code}"


def parse_status(raw) -> Optional[CallbackStatus]:
    """Return the known status for ``raw`` or None when it is not one."""
    try:
        return CallbackStatus(int(str(raw).strip()))
    except (TypeError, ValueError):
        return None


def _nvl(value) -> str:
    return "" if value is None else str(value)


def sign(message: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha512).digest()
    return base64.b64encode(digest).decode("ascii")


def build_signed_request(fields: Mapping[str, object], secret: str) -> str:
    """Hash of the purchase form fields in gateway order; missing values count as empty."""
    message = "".join(_nvl(fields.get(name)) for name in PURCHASE_HASH_FIELDS)
    return sign(message, secret)


def callback_hash(tran_id, req_time, status, secret: str) -> str:
    return sign(_nvl(tran_id) + _nvl(req_time) + _nvl(status), secret)


def verify_callback(tran_id, req_time, status, received_hash, secret: str) -> bool:
    if not received_hash or not secret:
        return False
    expected = callback_hash(tran_id, req_time, status, secret)
    return hmac.compare_digest(expected.encode("ascii"), str(received_hash).encode("utf-8"))


def generate_transaction_id() -> str:
    return f"TXN-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def format_req_time(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime(REQ_TIME_FORMAT)


def format_amount(amount) -> str:
    return str(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
