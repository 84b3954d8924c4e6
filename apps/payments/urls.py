from django.urls import path  # type: ignore

from .views import PaymentStatusView, payment_callback, payment_cancel

urlpatterns = [
    path("callback/", payment_callback, name="payment-callback"),
    path("cancel/", payment_cancel, name="payment-cancel"),
    path("status/<str:transaction_id>/", PaymentStatusView.as_view(), name="payment-status"),
]
