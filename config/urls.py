"""URL configuration.

Routes the Django admin and the application-level routers provided by
Django Rest Framework in each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/rooms/', include('apps.rooms.urls')),
    path('api/v1/cart/', include('apps.carts.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/discounts/', include('apps.discounts.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
]
