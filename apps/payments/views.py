"""Payment gateway endpoints."""

from __future__ import annotations

import json
import logging

from django.conf import settings  # type: ignore
from django.http import JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_http_methods  # type: ignore
from django_ratelimit.decorators import ratelimit  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from . import services
from .models import Payment
from .serializers import PaymentSerializer

logger = logging.getLogger(__name__)


def _callback_payload(request) -> dict:
    if request.method == "GET":
        return request.GET.dict()
    if request.content_type == "application/json":
        try:
            body = json.loads(request.body or b"{}")
        except json.JSONDecodeError:
            logger.warning("Payment callback with invalid JSON body")
            return {}
        return body if isinstance(body, dict) else {}
    return request.POST.dict()


def _callback_rate(group, request) -> str:
    return settings.RATELIMIT_CALLBACK_RATE


@csrf_exempt
@require_http_methods(["GET", "POST"])
@ratelimit(key="ip", rate=_callback_rate, method=ratelimit.ALL, block=False)
def payment_callback(request):
    """
    Gateway callback (return URL).

    Always acknowledged with 200 so the gateway does not retry forever; the
    outcome text is informational only. Over the rate limit the callback is
    acknowledged but not applied.
    """
    payload = _callback_payload(request)
    if getattr(request, "limited", False):
        logger.warning(
            "Rate limited payment callback for %s from %s",
            payload.get("tran_id"),
            request.META.get("REMOTE_ADDR"),
        )
        result = "Too many requests"
    else:
        result = services.handle_callback(payload)
    return JsonResponse(
        {
            "status": "received",
            "message": result,
            "transactionId": payload.get("tran_id"),
        }
    )


@require_http_methods(["GET"])
def payment_cancel(request):
    """
    Landing page the gateway redirects to when the guest abandons payment.

    Unauthenticated and unsigned, so it never changes a payment; the signed
    callback is the only thing that does.
    """
    transaction_id = request.GET.get("tran_id", "")
    payment = Payment.objects.filter(transaction_id=transaction_id).first() if transaction_id else None
    return JsonResponse(
        {
            "status": payment.status if payment else None,
            "message": "Payment was cancelled by the customer. No changes were made to your booking.",
            "transactionId": transaction_id or None,
        }
    )


class PaymentStatusView(APIView):
    """Payment status for the signed-in owner."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, transaction_id: str):  # type: ignore
        payment = services.get_payment_for_owner(request.user, transaction_id)
        return Response(PaymentSerializer(payment).data)
