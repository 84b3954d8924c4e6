from django.contrib import admin  # type: ignore

from .models import Room, RoomAvailability


class RoomAvailabilityInline(admin.TabularInline):
    model = RoomAvailability
    extra = 0


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("number", "room_type", "base_price", "capacity", "status", "is_active")
    list_filter = ("status", "room_type", "is_active")
    search_fields = ("number", "description")
    inlines = [RoomAvailabilityInline]


@admin.register(RoomAvailability)
class RoomAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("room", "date", "is_available", "dynamic_price")
    list_filter = ("is_available",)
    date_hierarchy = "date"
