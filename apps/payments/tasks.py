"""Celery tasks for the payment ledger."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import expire_stale_payments as expire_stale_payments_service

logger = logging.getLogger(__name__)


@shared_task(name="payments.expire_stale_payments")
def expire_stale_payments() -> dict[str, int]:
    """
    Expire checkouts the gateway never called back for, releasing the
    carts' hold on their rooms.

    Runs every few minutes through Celery Beat.
    """
    return {"expired": expire_stale_payments_service()}
