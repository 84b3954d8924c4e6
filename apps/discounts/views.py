"""API views for discount codes."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .models import Discount
from .serializers import DiscountSerializer, DiscountValidationSerializer, PublicDiscountSerializer


class DiscountViewSet(viewsets.ModelViewSet):
    """Administrators manage codes; any signed-in guest may list and check them."""

    queryset = Discount.objects.all()
    serializer_class = DiscountSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_fields = ["type", "is_active"]

    def get_permissions(self):  # type: ignore
        if self.action in ("active", "validate"):
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def perform_create(self, serializer):  # type: ignore
        serializer.instance = services.create_discount(serializer.validated_data)

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = services.update_discount(serializer.instance.pk, serializer.validated_data)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_discount(instance.pk)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):  # type: ignore
        discount = services.deactivate_discount(self.get_object().pk)
        return Response(DiscountSerializer(discount).data)

    @action(detail=False, methods=["get"])
    def active(self, request):  # type: ignore
        discounts = services.list_active_discounts()
        return Response(PublicDiscountSerializer(discounts, many=True).data)

    @action(detail=False, methods=["post"])
    def validate(self, request):  # type: ignore
        serializer = DiscountValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quote = services.validate_discount_code(
            serializer.validated_data["code"],
            serializer.validated_data["order_amount"],
            owner=request.user,
        )
        return Response(
            {
                "valid": True,
                "code": quote.code,
                "order_amount": quote.order_amount,
                "discount_amount": quote.amount,
                "final_amount": quote.final_amount,
            },
            status=status.HTTP_200_OK,
        )
