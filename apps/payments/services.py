"""Payment ledger.

Creates payments for checked-out carts, signs the purchase request and
applies gateway callbacks. A callback only ever moves a payment that is
still PENDING or PROCESSING; anything arriving later is kept in the audit
trail and otherwise ignored, so duplicate deliveries are harmless.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Mapping, Sequence

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.services import create_from_cart_item
from apps.carts.exceptions import EmptyCart
from apps.carts.models import Cart
from apps.discounts.exceptions import DiscountExhausted, DiscountNotFound
from apps.discounts.models import Discount
from apps.discounts.pricing import ZERO, quantize
from apps.discounts.services import redeem_discount
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import PaymentGatewayError

from . import gateway
from .events import PaymentCompleted, PaymentFailed
from .exceptions import PaymentNotFound
from .models import Payment, PaymentEvent

logger = logging.getLogger(__name__)

INVALID_SIGNATURE = "Invalid callback signature"


def _secret() -> str:
    return settings.PAYWAY_PUBLIC_KEY or ""


def purchase_url() -> str:
    return settings.PAYWAY_BASE_URL.rstrip("/") + settings.PAYWAY_PURCHASE_PATH


def _customer_names(owner) -> tuple[str, str]:
    first_name = (getattr(owner, "first_name", "") or "").strip()
    last_name = (getattr(owner, "last_name", "") or "").strip()
    if not first_name and not last_name:
        first_name = owner.get_username()
    return first_name, last_name


def _purchase_fields(payment_id: str, req_time: str, amount: Decimal, owner) -> dict:
    first_name, last_name = _customer_names(owner)
    return {
        "req_time": req_time,
        "merchant_id": settings.PAYWAY_MERCHANT_ID,
        "tran_id": payment_id,
        "amount": gateway.format_amount(amount),
        "firstname": first_name,
        "lastname": last_name,
        "email": getattr(owner, "email", "") or "",
        "phone": "",
        "type": "",
        "payment_option": "",
        "return_url": settings.PAYWAY_RETURN_URL,
        "cancel_url": settings.PAYWAY_CANCEL_URL,
        "continue_success_url": settings.PAYWAY_CONTINUE_SUCCESS_URL,
        "return_params": "",
        "lifetime": "",
        "skip_success_page": "1",
    }


@transaction.atomic
def initiate_payment(cart: Cart) -> Payment:
    """Create a PENDING payment for the cart and move the cart to CHECKOUT_PENDING."""
    if not cart.items.exists():
        raise EmptyCart("Cannot checkout an empty cart")
    if not settings.PAYWAY_MERCHANT_ID or not _secret():
        raise PaymentGatewayError("Payment gateway is not configured")

    owner = cart.owner
    transaction_id = gateway.generate_transaction_id()
    req_time = gateway.format_req_time()
    fields = _purchase_fields(transaction_id, req_time, cart.total_price, owner)
    request_hash = gateway.build_signed_request(fields, _secret())
    first_name, last_name = _customer_names(owner)

    payment = Payment.objects.create(
        transaction_id=transaction_id,
        owner=owner,
        cart=cart,
        amount=cart.total_price,
        currency=settings.PAYMENT_CURRENCY,
        status=Payment.Status.PENDING,
        req_time=req_time,
        request_hash=request_hash,
        request_fields=fields,
        payment_url=purchase_url(),
        customer_name=f"{first_name} {last_name}".strip(),
        customer_email=fields["email"],
    )
    PaymentEvent.objects.create(
        payment=payment,
        event="initiated",
        payload={"amount": fields["amount"], "cart_id": cart.pk},
        status=payment.status,
    )

    cart.status = Cart.Status.CHECKOUT_PENDING
    cart.transaction_id = transaction_id
    cart.checkout_initiated_at = timezone.now()
    cart.save(update_fields=["status", "transaction_id", "checkout_initiated_at", "updated_at"])

    logger.info("Initiated payment %s for cart %s: %s %s", transaction_id, cart.pk, payment.amount, payment.currency)
    return payment


def checkout_payload(payment: Payment) -> dict:
    """What the client needs to post the purchase form to the gateway."""
    form_fields = dict(payment.request_fields)
    form_fields["currency"] = payment.currency
    form_fields["hash"] = payment.request_hash
    return {
        "success": True,
        "message": "Checkout initiated. Redirect to the payment page to complete the purchase.",
        "transaction_id": payment.transaction_id,
        "payment_url": payment.payment_url,
        "total_amount": gateway.format_amount(payment.amount),
        "currency": payment.currency,
        "form_fields": form_fields,
    }


def get_payment_for_owner(owner, transaction_id: str) -> Payment:
    try:
        return Payment.objects.get(owner=owner, transaction_id=transaction_id)
    except Payment.DoesNotExist:
        raise PaymentNotFound(f"Payment not found: {transaction_id}") from None


def apportion(total: Decimal, weights: Sequence[Decimal]) -> List[Decimal]:
    """Split ``total`` across ``weights`` proportionally; the last share absorbs rounding."""
    if not weights:
        return []
    total = quantize(total)
    weight_sum = sum(weights, ZERO)
    if total <= ZERO or weight_sum <= ZERO:
        return [ZERO for _ in weights]

    shares = [quantize(total * weight / weight_sum) for weight in weights[:-1]]
    shares.append(quantize(total - sum(shares, ZERO)))
    return shares


def _normalize_payload(payload: Mapping) -> dict:
    return {key: (None if payload.get(key) is None else str(payload.get(key))) for key in payload.keys()}


def _clip(value: str | None, model, field_name: str) -> str:
    """Fit an untrusted callback value into a bounded column."""
    return (value or "")[: model._meta.get_field(field_name).max_length]


def _release_cart(cart: Cart | None, status: str) -> None:
    """Move a cart out of CHECKOUT_PENDING after an unsuccessful payment."""
    if cart is None or cart.status != Cart.Status.CHECKOUT_PENDING:
        return
    if status == Cart.Status.ACTIVE and Cart.objects.filter(owner_id=cart.owner_id, status=Cart.Status.ACTIVE).exists():
        # The guest started a new cart meanwhile; only one may be active
        status = Cart.Status.CANCELLED
    cart.status = status
    cart.save(update_fields=["status", "updated_at"])


def _mark_failed(uow: DjangoUnitOfWork, payment: Payment, status: str, reason: str, cart_status: str | None) -> None:
    payment.status = status
    payment.error_message = reason
    payment.failed_at = timezone.now()
    payment.save()
    if cart_status is not None:
        _release_cart(payment.cart, cart_status)
    if payment.owner_id:
        uow.record(
            PaymentFailed(
                aggregate_id=payment.pk,
                transaction_id=payment.transaction_id,
                owner_id=payment.owner_id,
                status=status,
                reason=reason,
            )
        )
    logger.warning("Payment %s -> %s: %s", payment.transaction_id, status, reason)


def _settle(uow: DjangoUnitOfWork, payment: Payment) -> None:
    cart = Cart.objects.select_for_update().filter(pk=payment.cart_id).first()
    if cart is None:
        raise EmptyCart(f"Payment {payment.transaction_id} has no cart to settle")
    items = list(cart.items.select_related("room").order_by("room_id", "check_in"))
    if not items:
        raise EmptyCart(f"Cart {cart.pk} has no items to settle")

    discount = None
    if cart.applied_discount_code:
        discount = Discount.objects.filter(code=cart.applied_discount_code).first()
        if discount is None:
            logger.warning("Discount %s vanished before settlement of %s", cart.applied_discount_code, payment.transaction_id)
        else:
            try:
                redeem_discount(discount.pk, owner=cart.owner, reference=payment.transaction_id)
            except (DiscountExhausted, DiscountNotFound) as exc:
                # The guest already paid the discounted price; honour it
                logger.warning(
                    "Could not redeem discount %s for %s: %s",
                    discount.code,
                    payment.transaction_id,
                    exc,
                )

    now = timezone.now()
    shares = apportion(cart.discount_amount, [item.price for item in items])
    bookings = [
        create_from_cart_item(
            item,
            owner=cart.owner,
            transaction_id=payment.transaction_id,
            paid_at=now,
            discount=discount,
            discount_share=share,
        )
        for item, share in zip(items, shares)
    ]

    cart.status = Cart.Status.COMPLETED
    cart.checkout_completed_at = now
    cart.save(update_fields=["status", "checkout_completed_at", "updated_at"])

    payment.status = Payment.Status.COMPLETED
    payment.completed_at = now
    payment.booking = bookings[0]
    payment.error_message = ""
    payment.save()

    uow.record(
        PaymentCompleted(
            aggregate_id=payment.pk,
            transaction_id=payment.transaction_id,
            owner_id=cart.owner_id,
            amount=payment.amount,
            booking_ids=[booking.pk for booking in bookings],
        )
    )
    logger.info("Payment %s settled into %s bookings", payment.transaction_id, len(bookings))


@transaction.atomic
def _apply_callback(transaction_id: str, data: dict) -> str:
    with DjangoUnitOfWork() as uow:
        payment = (
            Payment.objects.select_for_update()
            .select_related("cart")
            .filter(transaction_id=transaction_id)
            .first()
        )
        if payment is None:
            raise PaymentNotFound(f"Payment not found: {transaction_id}")

        raw_status = data.get("status")
        PaymentEvent.objects.create(
            payment=payment, event="callback", payload=data, status=_clip(raw_status, PaymentEvent, "status")
        )

        if not payment.is_open:
            logger.info("Ignoring callback for %s payment %s", payment.status, transaction_id)
            return "Already processed"

        payment.callback_hash = data.get("hash") or ""
        payment.callback_data = data
        payment.callback_received_at = timezone.now()
        if data.get("payment_option"):
            payment.payment_method = _clip(data["payment_option"], Payment, "payment_method")

        if not gateway.verify_callback(transaction_id, data.get("req_time"), raw_status, data.get("hash"), _secret()):
            _mark_failed(uow, payment, Payment.Status.FAILED, INVALID_SIGNATURE, cart_status=None)
            return "Invalid signature"

        if raw_status in (None, ""):
            _mark_failed(uow, payment, Payment.Status.FAILED, "No status provided in callback", Cart.Status.ACTIVE)
            return "Invalid callback: no status"

        status = gateway.parse_status(raw_status)
        if status is None:
            reason = f"Unknown status: {raw_status}"
            _mark_failed(uow, payment, Payment.Status.FAILED, reason, Cart.Status.ACTIVE)
            return reason

        if status == gateway.CallbackStatus.SUCCESS:
            _settle(uow, payment)
        elif status == gateway.CallbackStatus.PENDING:
            payment.status = Payment.Status.PROCESSING
            payment.save()
        elif status == gateway.CallbackStatus.FAILED:
            reason = data.get("message") or gateway.status_text(status)
            _mark_failed(uow, payment, Payment.Status.FAILED, reason, Cart.Status.ACTIVE)
        else:
            _mark_failed(
                uow,
                payment,
                Payment.Status.CANCELLED,
                gateway.status_text(status),
                Cart.Status.CANCELLED,
            )
        return gateway.status_text(status)


@transaction.atomic
def _record_processing_error(transaction_id: str, data: dict, reason: str) -> None:
    with DjangoUnitOfWork() as uow:
        payment = (
            Payment.objects.select_for_update()
            .select_related("cart")
            .filter(transaction_id=transaction_id)
            .first()
        )
        if payment is None:
            return
        PaymentEvent.objects.create(
            payment=payment,
            event="callback_error",
            payload=data,
            status=_clip(data.get("status"), PaymentEvent, "status"),
        )
        if payment.is_open:
            payment.callback_data = data
            payment.callback_received_at = timezone.now()
            _mark_failed(uow, payment, Payment.Status.FAILED, reason, Cart.Status.ACTIVE)


def handle_callback(payload: Mapping) -> str:
    """Apply a gateway callback. Never raises; returns a short outcome message."""
    data = _normalize_payload(payload)
    transaction_id = data.get("tran_id")
    if not transaction_id:
        logger.warning("Callback without transaction id: %s", data)
        return "Invalid callback: no transaction id"

    logger.info("Received callback for %s with status %s", transaction_id, data.get("status"))
    try:
        return _apply_callback(transaction_id, data)
    except PaymentNotFound:
        logger.warning("Callback for unknown payment %s", transaction_id)
        return "Payment not found"
    except Exception as exc:
        logger.error("Error processing callback for %s: %s", transaction_id, exc, exc_info=True)
        reason = f"Error processing callback: {exc}"
        try:
            _record_processing_error(transaction_id, data, reason)
        except Exception as record_exc:  # noqa: BLE001
            logger.error("Could not record callback failure for %s: %s", transaction_id, record_exc, exc_info=True)
        return reason


def expire_stale_payments(now: datetime | None = None) -> int:
    """Expire PENDING payments the gateway never reported back on and free their carts."""
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=settings.PAYMENT_PENDING_TTL_MINUTES)
    candidates = list(
        Payment.objects.filter(status=Payment.Status.PENDING, initiated_at__lt=cutoff).values_list(
            "transaction_id", flat=True
        )
    )

    expired = 0
    for transaction_id in candidates:
        with DjangoUnitOfWork() as uow:
            payment = (
                Payment.objects.select_for_update()
                .select_related("cart")
                .filter(transaction_id=transaction_id, status=Payment.Status.PENDING)
                .first()
            )
            if payment is None:
                continue
            PaymentEvent.objects.create(payment=payment, event="expired", payload={"cutoff": cutoff.isoformat()}, status="")
            _mark_failed(
                uow,
                payment,
                Payment.Status.EXPIRED,
                "Payment expired without a gateway callback",
                Cart.Status.ACTIVE,
            )
            expired += 1

    if expired:
        logger.info("Expired %s stale payments", expired)
    return expired
