from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import DiscountViewSet

router = SimpleRouter()
router.register(r"", DiscountViewSet, basename="discount")

urlpatterns = [
    path("", include(router.urls)),
]
