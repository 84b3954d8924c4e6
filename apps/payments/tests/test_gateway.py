import base64
import hashlib
import hmac
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from apps.payments import gateway

SECRET = "merchant-public-key"


def _expected(message: str) -> str:
    return base64.b64encode(hmac.new(SECRET.encode(), message.encode(), hashlib.sha512).digest()).decode()


def test_purchase_hash_concatenates_fields_in_gateway_order():
    fields = {name: f"<{name}>" for name in gateway.PURCHASE_HASH_FIELDS}

    assert gateway.build_signed_request(fields, SECRET) == _expected(
        "".join(f"<{name}>" for name in gateway.PURCHASE_HASH_FIELDS)
    )


def test_missing_purchase_fields_count_as_empty():
    fields = {"req_time": "20250101120000", "merchant_id": "m1", "tran_id": "TXN-1", "amount": "10.00", "phone": None}

    assert gateway.build_signed_request(fields, SECRET) == _expected("20250101120000m1TXN-110.00")


def test_purchase_hash_ignores_unlisted_fields():
    base = {"tran_id": "TXN-1", "amount": "10.00"}

    assert gateway.build_signed_request({**base, "currency": "USD"}, SECRET) == gateway.build_signed_request(
        base, SECRET
    )


def test_callback_hash_round_trip():
    signature = gateway.callback_hash("TXN-1", "20250101120000", "0", SECRET)

    assert signature == _expected("TXN-1202501011200000")
    assert gateway.verify_callback("TXN-1", "20250101120000", "0", signature, SECRET)


@pytest.mark.parametrize(
    "tran_id, req_time, status, secret",
    [
        ("TXN-2", "20250101120000", "0", SECRET),
        ("TXN-1", "20250101120001", "0", SECRET),
        ("TXN-1", "20250101120000", "2", SECRET),
        ("TXN-1", "20250101120000", "0", "other-key"),
    ],
)
def test_callback_hash_detects_tampering(tran_id, req_time, status, secret):
    signature = gateway.callback_hash("TXN-1", "20250101120000", "0", SECRET)

    assert not gateway.verify_callback(tran_id, req_time, status, signature, secret)


def test_verify_callback_rejects_missing_inputs():
    assert not gateway.verify_callback("TXN-1", "x", "0", None, SECRET)
    assert not gateway.verify_callback("TXN-1", "x", "0", "", SECRET)
    assert not gateway.verify_callback("TXN-1", "x", "0", "anything", "")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0", gateway.CallbackStatus.SUCCESS),
        (" 1 ", gateway.CallbackStatus.PENDING),
        (2, gateway.CallbackStatus.FAILED),
        ("3", gateway.CallbackStatus.CANCELLED),
        ("7", None),
        ("paid", None),
        (None, None),
    ],
)
def test_parse_status(raw, expected):
    assert gateway.parse_status(raw) == expected


def test_status_text():
    assert gateway.status_text(0) == "Payment successful"
    assert gateway.status_text("3") == "Payment cancelled"
    assert gateway.status_text("9") == "Unknown status: 9"


def test_transaction_id_format():
    first = gateway.generate_transaction_id()
    second = gateway.generate_transaction_id()

    assert re.fullmatch(r"TXN-\d{13}-[0-9a-f]{8}", first)
    assert first != second


def test_req_time_is_utc():
    moment = datetime(2025, 3, 9, 23, 30, 5, tzinfo=timezone(timedelta(hours=7)))

    assert gateway.format_req_time(moment) == "20250309163005"
    assert len(gateway.format_req_time()) == 14


def test_format_amount():
    assert gateway.format_amount(Decimal("10")) == "10.00"
    assert gateway.format_amount("99.995") == "100.00"
