"""API views for the cart."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.utils.decorators import method_decorator  # type: ignore
from django_ratelimit.decorators import ratelimit  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .serializers import AddToCartSerializer, ApplyDiscountSerializer, CartSerializer

cart_ratelimit = method_decorator(
    ratelimit(key="user_or_ip", rate=settings.RATELIMIT_CART_RATE, method=ratelimit.UNSAFE, block=True)
)
checkout_ratelimit = method_decorator(
    ratelimit(key="user_or_ip", rate=settings.RATELIMIT_CHECKOUT_RATE, method="POST", block=True)
)


class CartViewSet(viewsets.ViewSet):
    """The signed-in guest's active cart."""

    permission_classes = [permissions.IsAuthenticated]

    def _respond(self, cart, code: int = status.HTTP_200_OK) -> Response:
        return Response(CartSerializer(cart).data, status=code)

    def list(self, request):  # type: ignore
        cart = services.get_or_create_active_cart(request.user)
        return self._respond(services.recalculate_totals(cart))

    @action(detail=False, methods=["post"])
    @cart_ratelimit
    def items(self, request):  # type: ignore
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        cart = services.add_item(
            request.user,
            data["room_id"],
            data["check_in"],
            data["check_out"],
            data["guests_count"],
        )
        return self._respond(cart, status.HTTP_201_CREATED)

    @action(detail=False, methods=["delete"], url_path=r"items/(?P<item_id>\d+)")
    @cart_ratelimit
    def remove_item(self, request, item_id=None):  # type: ignore
        return self._respond(services.remove_item(request.user, int(item_id)))

    @action(detail=False, methods=["post", "delete"])
    @cart_ratelimit
    def discount(self, request):  # type: ignore
        if request.method == "DELETE":
            return self._respond(services.remove_discount(request.user))
        serializer = ApplyDiscountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._respond(services.apply_discount(request.user, serializer.validated_data["code"]))

    @action(detail=False, methods=["delete"])
    @cart_ratelimit
    def clear(self, request):  # type: ignore
        return self._respond(services.clear(request.user))

    @action(detail=False, methods=["post"])
    @checkout_ratelimit
    def checkout(self, request):  # type: ignore
        return Response(services.checkout(request.user), status=status.HTTP_200_OK)
